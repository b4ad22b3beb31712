class CBCParserError(ValueError):
    """Base class for every error raised while decoding or rendering a CBC export."""


class InvalidCSVError(CBCParserError):
    def __init__(self, message: str = "invalid csv file"):
        super().__init__(message)


class InsufficientRowsError(CBCParserError):
    def __init__(self, message: str = "csv must have at least 2 rows"):
        super().__init__(message)


class BlankRecordError(CBCParserError):
    def __init__(self, message: str = "cbc record was a blank"):
        super().__init__(message)


class InvalidOutputFormatError(CBCParserError):
    def __init__(self, message: str = "invalid output format"):
        super().__init__(message)


class InvalidNormalRangesError(CBCParserError):
    pass


class UnknownDeviceError(CBCParserError):
    pass
