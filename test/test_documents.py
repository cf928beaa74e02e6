import pytest

from utils.documents import (
    strip_document,
    validate_cpf,
    validate_cnpj,
    validate_document,
    format_cpf,
    format_cnpj,
    format_document,
    generate_cpf,
    generate_cnpj,
)


def test_strip_document_keeps_only_digits():
    assert strip_document("111.444.777-35") == "11144477735"
    assert strip_document("11.222.333/0001-81") == "11222333000181"
    assert strip_document("") == ""


@pytest.mark.parametrize("cpf", ["111.444.777-35", "11144477735", "529.982.247-25"])
def test_valid_cpf(cpf):
    assert validate_cpf(cpf)


@pytest.mark.parametrize("cpf", [
    "000.000.000-00",
    "111.111.111-11",
    "99999999999",
    "123.456.789-09",
    "111.444.777-36",
    "1114447773",
    "111444777350",
    "abc",
])
def test_invalid_cpf(cpf):
    assert not validate_cpf(cpf)


@pytest.mark.parametrize("cnpj", ["11.222.333/0001-81", "11222333000181", "45.997.418/0001-53"])
def test_valid_cnpj(cnpj):
    assert validate_cnpj(cnpj)


@pytest.mark.parametrize("cnpj", [
    "00.000.000/0000-00",
    "11111111111111",
    "11.222.333/0001-82",
    "1122233300018",
])
def test_invalid_cnpj(cnpj):
    assert not validate_cnpj(cnpj)


def test_validate_document_dispatches_on_length():
    assert validate_document("111.444.777-35")
    assert validate_document("11.222.333/0001-81")
    assert not validate_document("11.222.333/0001-80")
    assert not validate_document("123")


def test_format_cpf_and_cnpj():
    assert format_cpf("11144477735") == "111.444.777-35"
    assert format_cnpj("11222333000181") == "11.222.333/0001-81"
    assert format_document("11144477735") == "111.444.777-35"
    assert format_document("11222333000181") == "11.222.333/0001-81"


def test_format_returns_input_when_length_is_wrong():
    assert format_cpf("1234") == "1234"
    assert format_cnpj("11.222") == "11.222"


def test_format_is_idempotent_and_strip_recovers_digits():
    for _ in range(20):
        cpf = generate_cpf()
        cnpj = generate_cnpj()
        assert format_cpf(format_cpf(cpf)) == format_cpf(cpf)
        assert format_cnpj(format_cnpj(cnpj)) == format_cnpj(cnpj)
        assert strip_document(format_cpf(cpf)) == cpf
        assert strip_document(format_cnpj(cnpj)) == cnpj


def test_generated_documents_are_valid():
    for _ in range(50):
        assert validate_cpf(generate_cpf())
        assert validate_cnpj(generate_cnpj())

    formatted = generate_cpf(formatted=True)
    assert len(formatted) == 14 and validate_cpf(formatted)

    formatted = generate_cnpj(formatted=True)
    assert len(formatted) == 18 and validate_cnpj(formatted)
