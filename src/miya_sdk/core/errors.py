"""Error types for the MIYA protocol SDK."""


class MiyaError(Exception):
    """Base exception for all SDK errors."""
    pass


class EncodingError(MiyaError, ValueError):
    """A caller-supplied field cannot be encoded."""
    pass


class InvalidFieldError(EncodingError):
    """A numeric field is out of range, or a field has the wrong type."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Invalid field '{field}': {message}")


class InvalidLengthError(EncodingError):
    """A byte-string field does not have the length it was declared with."""

    def __init__(self, field: str, expected: int | str, actual: int):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Invalid length for '{field}': expected {expected}, got {actual}"
        )


class AddressError(MiyaError, ValueError):
    """Raised for malformed base58 keys and addresses."""
    pass


class InvalidSeedsError(AddressError):
    """The seeds (with bump) hash to a point on the ed25519 curve."""
    pass


class NoValidAddressError(MiyaError):
    """No bump in [0, 255] produced an off-curve program address."""
    pass


class MalformedAccountError(MiyaError):
    """Raw account bytes do not match the expected layout."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"Malformed {kind} account: {message}")


class NoteStateError(MiyaError):
    """A deposit note was moved through an illegal lifecycle transition."""
    pass


class LedgerRpcError(MiyaError):
    """Errors from the ledger JSON-RPC endpoint."""

    def __init__(self, message: str, method: str = "", code: int | None = None):
        self.method = method
        self.code = code
        prefix = f"RPC error [{method}]" if method else "RPC error"
        super().__init__(f"{prefix}: {message}")


class MalformedInstructionError(MiyaError):
    """Raw instruction bytes do not match the expected layout."""

    def __init__(self, kind: str, message: str):
        self.kind = kind
        super().__init__(f"Malformed {kind} instruction: {message}")
