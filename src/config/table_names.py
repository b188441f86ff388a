from enum import Enum


class TableNames(str, Enum):
    DINNERS = "dinners"
    RSVPS = "rsvps"
