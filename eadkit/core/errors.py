class EADKitError(Exception):
    """
    Base exception for all eadkit failures.
    """

    pass


class DecodeError(EADKitError, ValueError):
    """
    Raised when a rich-text fragment is not well-formed markup.

    No partial output accompanies this error.
    """

    pass


class TitleNotFoundError(DecodeError):
    """
    Raised when a finding aid carries no title proper other than a "filing" one.
    """

    pass


class ReaderError(EADKitError):
    """
    Raised when a document cannot be read as an EAD finding aid.
    """

    pass


class ProfileError(EADKitError):
    """
    Raised when a validation profile is misconfigured or invalid.
    """

    pass
