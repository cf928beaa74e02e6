"""
Brazilian taxpayer document helpers (CPF and CNPJ).

CPF identifies individuals (11 digits, ``XXX.XXX.XXX-YY``) and CNPJ identifies
companies (14 digits, ``XX.XXX.XXX/XXXX-YY``). Both end in two check digits
computed with weighted modulo-11 sums over the preceding digits.
"""
import random
import re

CPF_LENGTH = 11
CNPJ_LENGTH = 14

CPF_FIRST_WEIGHTS = list(range(10, 1, -1))
CPF_SECOND_WEIGHTS = list(range(11, 1, -1))
CNPJ_FIRST_WEIGHTS = [5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]
CNPJ_SECOND_WEIGHTS = [6, 5, 4, 3, 2, 9, 8, 7, 6, 5, 4, 3, 2]

# Sequences that pass the checksum but are never issued
CPF_BLOCKLIST = {str(d) * CPF_LENGTH for d in range(10)} | {"12345678909"}
CNPJ_BLOCKLIST = {str(d) * CNPJ_LENGTH for d in range(10)}

_NON_DIGITS = re.compile(r"\D")


def strip_document(document: str) -> str:
    """
    Removes every non-digit character from a document.

    Args:
        document (str): Formatted or unformatted document.

    Returns:
        str: Digits only, e.g. "111.444.777-35" -> "11144477735".
    """
    return _NON_DIGITS.sub("", document or "")


def _check_digit(digits: str, weights: list) -> int:
    total = sum(int(digit) * weight for digit, weight in zip(digits, weights))
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def _cpf_check_digits(base: str) -> str:
    first = _check_digit(base, CPF_FIRST_WEIGHTS)
    second = _check_digit(base + str(first), CPF_SECOND_WEIGHTS)
    return f"{first}{second}"


def _cnpj_check_digits(base: str) -> str:
    first = _check_digit(base, CNPJ_FIRST_WEIGHTS)
    second = _check_digit(base + str(first), CNPJ_SECOND_WEIGHTS)
    return f"{first}{second}"


def validate_cpf(cpf: str) -> bool:
    """
    Validates a CPF, formatted or not.

    Args:
        cpf (str): e.g. "111.444.777-35" or "11144477735".

    Returns:
        bool: True when the CPF has 11 digits, is not a blocked sequence and
        both check digits match.
    """
    digits = strip_document(cpf)
    if len(digits) != CPF_LENGTH or digits in CPF_BLOCKLIST:
        return False
    return digits[9:] == _cpf_check_digits(digits[:9])


def validate_cnpj(cnpj: str) -> bool:
    """
    Validates a CNPJ, formatted or not.

    Args:
        cnpj (str): e.g. "11.222.333/0001-81" or "11222333000181".

    Returns:
        bool: True when the CNPJ has 14 digits, is not a blocked sequence and
        both check digits match.
    """
    digits = strip_document(cnpj)
    if len(digits) != CNPJ_LENGTH or digits in CNPJ_BLOCKLIST:
        return False
    return digits[12:] == _cnpj_check_digits(digits[:12])


def format_cpf(cpf: str) -> str:
    """
    Formats a CPF as XXX.XXX.XXX-YY.

    Returns the input unchanged when it does not hold exactly 11 digits.
    """
    digits = strip_document(cpf)
    if len(digits) != CPF_LENGTH:
        return cpf
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def format_cnpj(cnpj: str) -> str:
    """
    Formats a CNPJ as XX.XXX.XXX/XXXX-YY.

    Returns the input unchanged when it does not hold exactly 14 digits.
    """
    digits = strip_document(cnpj)
    if len(digits) != CNPJ_LENGTH:
        return cnpj
    return f"{digits[:2]}.{digits[2:5]}.{digits[5:8]}/{digits[8:12]}-{digits[12:]}"


def is_cpf(document: str) -> bool:
    return len(strip_document(document)) == CPF_LENGTH


def validate_document(document: str) -> bool:
    """
    Validates a producer document, picking CPF for 11 digits and CNPJ otherwise.
    """
    if is_cpf(document):
        return validate_cpf(document)
    return validate_cnpj(document)


def format_document(document: str) -> str:
    if is_cpf(document):
        return format_cpf(document)
    return format_cnpj(document)


def generate_cpf(formatted: bool = False) -> str:
    """
    Generates a random valid CPF.

    Args:
        formatted (bool): When True returns "XXX.XXX.XXX-YY".

    Returns:
        str: A CPF that passes validate_cpf.
    """
    while True:
        base = "".join(random.choices("0123456789", k=9))
        digits = base + _cpf_check_digits(base)
        if digits not in CPF_BLOCKLIST:
            break
    return format_cpf(digits) if formatted else digits


def generate_cnpj(formatted: bool = False) -> str:
    """
    Generates a random valid CNPJ with the "0001" branch suffix.

    Args:
        formatted (bool): When True returns "XX.XXX.XXX/XXXX-YY".

    Returns:
        str: A CNPJ that passes validate_cnpj.
    """
    while True:
        base = "".join(random.choices("0123456789", k=8)) + "0001"
        digits = base + _cnpj_check_digits(base)
        if digits not in CNPJ_BLOCKLIST:
            break
    return format_cnpj(digits) if formatted else digits
