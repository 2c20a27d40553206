from alloccheck.validator.rules import RULES
from alloccheck.validator.validator import Validator, validate_dataset

__all__ = ["RULES", "Validator", "validate_dataset"]
