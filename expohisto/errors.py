from abc import abstractmethod

from overrides import overrides, EnforceOverrides


class ExpoHistoError(Exception, EnforceOverrides):
    def message(self) -> str:
        return ", ".join(str(arg) for arg in self.args)

    @classmethod
    @abstractmethod
    def name(cls) -> str:
        """Return the error name"""
        pass


class InvalidArgumentError(ExpoHistoError, ValueError):
    @classmethod
    @overrides
    def name(cls) -> str:
        return "InvalidArgument"


class OutOfRangeError(ExpoHistoError, ValueError):
    @classmethod
    @overrides
    def name(cls) -> str:
        return "OutOfRange"


class IndexUnderflowError(OutOfRangeError):
    @classmethod
    @overrides
    def name(cls) -> str:
        return "Underflow"


class IndexOverflowError(OutOfRangeError):
    @classmethod
    @overrides
    def name(cls) -> str:
        return "Overflow"


class ConfigurationError(ExpoHistoError, ValueError):
    @classmethod
    @overrides
    def name(cls) -> str:
        return "Configuration"
