"""Custom exceptions for mindkit.

Configuration errors (subclass ConfigurationError) are fatal. They mean the
tree artifact and the preprocessing artifact are corrupted or do not belong
together, and no prediction should be produced from them:

- MalformedTreeError: a node references a missing child, the node graph has a
  cycle or shared child, or a split reads a feature the vector does not have.
- FeatureOrderMismatchError: the feature labels and the encoding disagree in
  length.
- PreprocessingSpecError: the preprocessing artifact is internally
  inconsistent (e.g. a categorical column without a vocabulary).

Column validation exceptions (subclass ValueError) are raised by the
analytics functions when they are asked about columns the dataset lacks:

- ColumnsNotFoundError
- DuplicateColumnsError

Bad user input is not an exception: it is returned as a ValidationReport.
"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Base class for fatal artifact errors.

    Catch this to handle any corrupted or incompatible model/preprocessing
    artifact. It deliberately does not subclass ValueError so that pydantic
    validators let it propagate unchanged instead of wrapping it.
    """


class MalformedTreeError(ConfigurationError):
    """Raised when the decision tree node arena is not a valid binary tree.

    Attributes:
        node_index (int | None): Index of the offending node, when known.

    Examples:
        >>> err = MalformedTreeError("left child 9 out of range", node_index=2)
        >>> err.node_index
        2
    """

    node_index: int | None

    def __init__(self, message: str, *, node_index: int | None = None) -> None:
        """Initialize MalformedTreeError.

        Args:
            message (str): Description of the structural problem.
            node_index (int | None): Index of the offending node.
        """
        super().__init__(message)
        self.node_index = node_index

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={str(self)!r}, node_index={self.node_index!r})"


class FeatureOrderMismatchError(ConfigurationError):
    """Raised when the declared feature order and the encoding length disagree.

    Attributes:
        expected (int): Number of features the encoding produces.
        actual (int): Number of labels (or vector entries) actually present.

    Examples:
        >>> err = FeatureOrderMismatchError(expected=12, actual=11)
        >>> str(err)
        'Feature order has 11 entries but the encoding produces 12'
    """

    expected: int
    actual: int

    def __init__(self, *, expected: int, actual: int) -> None:
        """Initialize FeatureOrderMismatchError.

        Args:
            expected (int): Number of features the encoding produces.
            actual (int): Number of entries actually present.
        """
        super().__init__(f"Feature order has {actual} entries but the encoding produces {expected}")
        self.expected = expected
        self.actual = actual


class PreprocessingSpecError(ConfigurationError):
    """Raised when a preprocessing artifact references columns it does not describe.

    Attributes:
        columns (list[str]): The columns with missing definitions.
    """

    columns: list[str]

    def __init__(self, message: str, *, columns: list[str]) -> None:
        """Initialize PreprocessingSpecError.

        Args:
            message (str): Description of the inconsistency.
            columns (list[str]): The columns with missing definitions.
        """
        super().__init__(f"{message}: {sorted(columns)}")
        self.columns = columns


class ColumnsNotFoundError(ValueError):
    """Raised when requested columns do not exist in a dataset.

    Attributes:
        missing_columns (list[str]): Column names that were not found.
        available_columns (list[str]): Column names present in the dataset.

    Examples:
        >>> err = ColumnsNotFoundError(
        ...     missing_columns=["CGPA"],
        ...     available_columns=["Age", "Depression"],
        ... )
        >>> err.missing_columns
        ['CGPA']
    """

    missing_columns: list[str]
    available_columns: list[str]

    def __init__(
        self,
        missing_columns: list[str],
        available_columns: list[str],
    ) -> None:
        """Initialize ColumnsNotFoundError.

        Args:
            missing_columns (list[str]): Column names not found in the dataset.
            available_columns (list[str]): Column names present in the dataset.
        """
        super().__init__(f"Columns not found in dataset: {sorted(missing_columns)}")
        self.missing_columns = missing_columns
        self.available_columns = available_columns


class DuplicateColumnsError(ValueError):
    """Raised when a column list names the same column twice.

    Attributes:
        columns (list[str]): The column list that contains duplicates.
        duplicate_columns (list[str]): Each duplicated name, listed once.

    Examples:
        >>> err = DuplicateColumnsError(columns=["Age", "Age", "CGPA"])
        >>> err.duplicate_columns
        ['Age']
    """

    columns: list[str]
    duplicate_columns: list[str]

    def __init__(self, columns: list[str]) -> None:
        """Initialize DuplicateColumnsError.

        Args:
            columns (list[str]): The column list containing duplicates.
        """
        super().__init__("Duplicate column names are not allowed")
        self.columns = columns
        seen: set[str] = set()
        self.duplicate_columns = []
        for col in columns:
            if col in seen and col not in self.duplicate_columns:
                self.duplicate_columns.append(col)
            seen.add(col)
