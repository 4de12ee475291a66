from enum import Enum, IntEnum


class ChannelType(IntEnum):
    """Kind of measure carried by a channel label."""
    WAVELENGTH = 1
    HB = 2


class HbTag(str, Enum):
    """Hemoglobin species suffix used in 'Hb' channel labels (e.g. S1D2HbO)."""
    OXY = "O"
    DEOXY = "R"
    TOTAL = "T"


HB_TAGS = tuple(tag.value for tag in HbTag)
