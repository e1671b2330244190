"""
Typed Exception Hierarchy for the Coffee Liquidation Kernel.

Validation rejections (a payment with no amount, an empty or duplicate
report number) are NOT exceptions: engines return result objects that the
caller inspects.  The exceptions below cover the remaining failures:
lookups of records that do not exist, storage records that cannot be
mapped, and invalid configuration.

Every exception has a ``code`` class attribute (machine-readable) and
carries its context as attributes, never only inside the message.

    CoffeeKernelError (base)
    |
    +-- ContractError
    |   +-- ContractNotFoundError
    |   +-- ShipmentLotNotFoundError
    |   +-- DeductionNotFoundError
    |
    +-- RecordError
    |   +-- RecordMappingError
    |   +-- UnknownCompanyError
    |
    +-- ConfigurationError

Category   | Code                 | When Raised
-----------|----------------------|-----------------------------------------
Contract   | CONTRACT_NOT_FOUND   | Contract ID not in the workspace
           | LOT_NOT_FOUND        | Lot ID not in the contract
           | DEDUCTION_NOT_FOUND  | Deduction ID not in the contract ledger
-----------|----------------------|-----------------------------------------
Record     | RECORD_MAPPING_ERROR | Stored record lacks a required field
           | UNKNOWN_COMPANY      | Company outside the closed set
-----------|----------------------|-----------------------------------------
Config     | CONFIGURATION_ERROR  | Missing key or invalid value in YAML
"""


class CoffeeKernelError(Exception):
    """
    Base exception for all coffee kernel errors.

    All subclasses must have a ``code`` class attribute.
    """

    code: str = "COFFEE_KERNEL_ERROR"


# Contract-related exceptions


class ContractError(CoffeeKernelError):
    """Base exception for contract lookups."""

    code: str = "CONTRACT_ERROR"


class ContractNotFoundError(ContractError):
    """Contract with given ID was not found."""

    code: str = "CONTRACT_NOT_FOUND"

    def __init__(self, contract_id: str):
        self.contract_id = contract_id
        super().__init__(f"Contract not found: {contract_id}")


class ShipmentLotNotFoundError(ContractError):
    """Shipment lot with given ID is not part of the contract."""

    code: str = "LOT_NOT_FOUND"

    def __init__(self, contract_id: str, lot_id: str):
        self.contract_id = contract_id
        self.lot_id = lot_id
        super().__init__(f"Lot {lot_id} not found in contract {contract_id}")


class DeductionNotFoundError(ContractError):
    """Deduction item with given ID is not in the ledger."""

    code: str = "DEDUCTION_NOT_FOUND"

    def __init__(self, deduction_id: str):
        self.deduction_id = deduction_id
        super().__init__(f"Deduction not found: {deduction_id}")


# Storage record exceptions


class RecordError(CoffeeKernelError):
    """Base exception for storage boundary mapping."""

    code: str = "RECORD_ERROR"


class RecordMappingError(RecordError):
    """A stored record cannot be mapped to a domain model."""

    code: str = "RECORD_MAPPING_ERROR"

    def __init__(self, record_type: str, field_name: str, record_id: str | None = None):
        self.record_type = record_type
        self.field_name = field_name
        self.record_id = record_id
        super().__init__(
            f"{record_type} record {record_id or '<unknown>'} "
            f"is missing required field '{field_name}'"
        )


class UnknownCompanyError(RecordError):
    """Company value is not one of the exporting legal entities."""

    code: str = "UNKNOWN_COMPANY"

    def __init__(self, company: str):
        self.company = company
        super().__init__(f"Unknown company: {company!r}")


# Configuration exceptions


class ConfigurationError(CoffeeKernelError):
    """Liquidation configuration is missing a key or holds an invalid value."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Invalid configuration for '{key}': {reason}")
