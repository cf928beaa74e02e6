from enum import Enum


class BrazilianState(str, Enum):
    """
    Brazilian state codes (UF): the 26 states plus the Federal District.
    """
    AC = "AC"  # Acre
    AL = "AL"  # Alagoas
    AP = "AP"  # Amapá
    AM = "AM"  # Amazonas
    BA = "BA"  # Bahia
    CE = "CE"  # Ceará
    DF = "DF"  # Distrito Federal
    ES = "ES"  # Espírito Santo
    GO = "GO"  # Goiás
    MA = "MA"  # Maranhão
    MT = "MT"  # Mato Grosso
    MS = "MS"  # Mato Grosso do Sul
    MG = "MG"  # Minas Gerais
    PA = "PA"  # Pará
    PB = "PB"  # Paraíba
    PR = "PR"  # Paraná
    PE = "PE"  # Pernambuco
    PI = "PI"  # Piauí
    RJ = "RJ"  # Rio de Janeiro
    RN = "RN"  # Rio Grande do Norte
    RS = "RS"  # Rio Grande do Sul
    RO = "RO"  # Rondônia
    RR = "RR"  # Roraima
    SC = "SC"  # Santa Catarina
    SP = "SP"  # São Paulo
    SE = "SE"  # Sergipe
    TO = "TO"  # Tocantins


class CropType(str, Enum):
    """
    Main crops grown by the registered farms.
    """
    SOY = "soy"
    CORN = "corn"
    COTTON = "cotton"
    COFFEE = "coffee"
    SUGARCANE = "sugarcane"


class SortOrder(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


class ProducerSortField(str, Enum):
    NAME = "name"
    DOCUMENT = "document"
    CREATED_AT = "createdAt"


class FarmSortField(str, Enum):
    NAME = "name"
    TOTAL_AREA = "totalArea"
    ARABLE_AREA = "arableArea"
    VEGETATION_AREA = "vegetationArea"
    CITY = "city"
    STATE = "state"
    CREATED_AT = "createdAt"


class CitySortField(str, Enum):
    NAME = "name"
    STATE = "state"
    IBGE_CODE = "ibgeCode"
