"""Custom exceptions for the car price pipeline."""


class CarPriceError(Exception):
    """Base exception for pipeline errors."""

    pass


class MissingColumnsError(CarPriceError, ValueError):
    """
    Raised when the input table lacks columns a stage depends on.

    This can happen when:
    - The CSV header does not name a required column (after alias mapping)
    - A cleaning stage is asked to process a column that was dropped earlier
    """

    def __init__(self, missing, stage: str = "input"):
        self.missing = sorted(missing)
        self.stage = stage
        super().__init__(
            f"{stage}: missing required column(s): {', '.join(self.missing)}"
        )


class EmptyNumericColumnError(CarPriceError, ValueError):
    """
    Raised when no cell of a numeric column survives parsing.

    Mean imputation has no defined value in that case, so the column cannot
    be repaired.
    """

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"no valid values in {column} column after cleaning")


class ModelFitError(CarPriceError):
    """
    Raised when a model cannot be fitted on the encoded matrix.

    This can happen when:
    - Every row was removed during cleaning
    - The requested fold count is below 2 or above the number of rows
    """

    pass
