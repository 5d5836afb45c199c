from enum import Enum


class TransportType(str, Enum):
    OPEN = "openTransport"
    ENCLOSED = "enclosedTransport"

    def __str__(self):
        return self.value


class VehicleValue(str, Enum):
    UNDER_100K = "under100k"
    UNDER_300K = "under300k"
    UNDER_500K = "under500k"
    OVER_500K = "over500k"

    def __str__(self):
        return self.value

    @property
    def forces_premium(self) -> bool:
        return self in (VehicleValue.UNDER_500K, VehicleValue.OVER_500K)


class PaymentMethod(str, Enum):
    CREDIT_CARD = "CREDIT_CARD"
    ACH_CHECK_COD = "ACH_CHECK_COD"

    def __str__(self):
        return self.value


class TrafficStatus(str, Enum):
    LIGHT = "light"
    MODERATE = "moderate"
    HEAVY = "heavy"

    def __str__(self):
        return self.value


class RouteCategory(str, Enum):
    POPULAR = "popular"
    REGULAR = "regular"
    REMOTE = "remote"

    def __str__(self):
        return self.value


class TollRegion(str, Enum):
    # Declaration order is the apportionment order.
    NORTHEAST = "northeast"
    NEW_ENGLAND = "newEngland"
    MID_ATLANTIC = "midAtlantic"
    GREAT_LAKES_MIDWEST = "greatLakesMidwest"
    SOUTHEAST = "southeast"
    TEXAS_SOUTHERN_PLAINS = "texasSouthernPlains"
    MOUNTAIN_WEST = "mountainWest"
    GREAT_PLAINS = "greatPlains"
    PACIFIC_COAST = "pacificCoast"
    LOUISIANA = "louisiana"

    def __str__(self):
        return self.value


class SignalKind(str, Enum):
    WEATHER = "weather"
    TRAFFIC = "traffic"
    FUEL = "fuel"
    AUTO_SHOW = "auto_show"
    TOLLS = "tolls"

    def __str__(self):
        return self.value


class LeadAction(str, Enum):
    CALCULATE_BUTTON = "CALCULATE_BUTTON"
    EMAIL_QUOTE = "EMAIL_QUOTE"
    CALL_ME = "CALL_ME"
    BOOK_NOW = "BOOK_NOW"

    def __str__(self):
        return self.value
