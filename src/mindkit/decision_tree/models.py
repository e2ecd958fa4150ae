"""Pydantic models for the serialized decision tree and its predictions."""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, model_validator

from mindkit.exceptions import MalformedTreeError

# ---------------------------------------------------------------------------
# Public type aliases
# ---------------------------------------------------------------------------

type FeatureVector = tuple[float, ...]

type Direction = Literal["left", "right"]

type RiskLevel = Literal["HIGH", "LOW"]

type IssueKind = Literal["not_a_number", "out_of_range"]

# ---------------------------------------------------------------------------
# Tree arena
# ---------------------------------------------------------------------------


class InternalNode(BaseModel):
    """A split node: `vector[feature_index] <= threshold` goes left, otherwise right.

    Attributes:
        feature_index (int): Position in the feature vector that is compared.
        threshold (float): Split threshold.
        left (int): Arena index of the child taken when the comparison holds.
        right (int): Arena index of the child taken otherwise.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    feature_index: int = Field(ge=0, description="Position in the feature vector that is compared.")
    threshold: float = Field(description="Split threshold; values <= threshold go left.")
    left: int = Field(description="Arena index of the left child.")
    right: int = Field(description="Arena index of the right child.")


class LeafNode(BaseModel):
    """A terminal node holding per-class training counts.

    Attributes:
        value (list[float]): Per-class counts, index 1 being the positive class.

    Examples:
        >>> LeafNode(value=[80, 20]).positive_probability
        0.2
        >>> LeafNode(value=[0, 0]).positive_probability
        0.0
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    value: list[float] = Field(min_length=1, description="Per-class counts; index 1 is the positive class.")

    @property
    def positive_probability(self) -> float:
        """float: Share of the positive class, 0.0 for an empty or single-class leaf."""
        total = sum(self.value)
        if total <= 0 or len(self.value) < 2:
            return 0.0
        return self.value[1] / total


def _node_kind(node: Any) -> str:
    """Pick the arena node type from a serialized node or a model instance.

    Serialized trees carry an ``is_leaf`` flag; when it is absent a node
    without a ``left`` child is treated as a leaf.

    Args:
        node (Any): A dict from the JSON artifact or an existing node model.

    Returns:
        str: ``"leaf"`` or ``"internal"``.
    """
    if isinstance(node, LeafNode):
        return "leaf"
    if isinstance(node, InternalNode):
        return "internal"
    if isinstance(node, dict):
        if "is_leaf" in node:
            return "leaf" if node["is_leaf"] else "internal"
        return "internal" if "left" in node else "leaf"
    return "internal"


type TreeNode = Annotated[
    Annotated[LeafNode, Tag("leaf")] | Annotated[InternalNode, Tag("internal")],
    Discriminator(_node_kind),
]


class ModelMetrics(BaseModel):
    """Hold-out metrics stored alongside the trained tree. Display only."""

    model_config = ConfigDict(frozen=True, extra="allow")

    precision: float = Field(default=0.0, ge=0.0, le=1.0)
    recall: float = Field(default=0.0, ge=0.0, le=1.0)
    f1: float = Field(default=0.0, ge=0.0, le=1.0)


class TreeModel(BaseModel):
    """A trained binary decision tree stored as an arena of nodes.

    Node 0 is the root. Children are referenced by arena index, so child
    lookup is a list index and no node owns another.

    The artifact layout ``{"tree": {"nodes": [...]}, "threshold": ..., "metrics": {...}}``
    is accepted as well as a flat ``nodes`` list.

    Attributes:
        nodes (list[TreeNode]): The node arena.
        threshold (float): Probability cutoff for the positive class.
        metrics (ModelMetrics): Stored evaluation metrics.

    Raises:
        MalformedTreeError: At construction, when a child index is out of
            range or a node can be reached twice (a cycle or shared child).

    Examples:
        >>> tree = TreeModel.model_validate({
        ...     "tree": {"nodes": [
        ...         {"is_leaf": False, "feature_index": 0, "threshold": 2.5, "left": 1, "right": 2},
        ...         {"is_leaf": True, "value": [80, 20]},
        ...         {"is_leaf": True, "value": [10, 90]},
        ...     ]},
        ...     "threshold": 0.5,
        ... })
        >>> tree.depth, tree.leaf_count
        (1, 2)
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[TreeNode] = Field(min_length=1, description="Node arena; index 0 is the root.")
    threshold: float = Field(default=0.5, ge=0.0, le=1.0, description="Positive-class probability cutoff.")
    metrics: ModelMetrics = Field(default_factory=ModelMetrics, description="Stored evaluation metrics.")

    @model_validator(mode="before")
    @classmethod
    def _lift_nested_nodes(cls, data: Any) -> Any:
        """Accept the artifact's ``tree.nodes`` nesting.

        Args:
            data (Any): Raw input.

        Returns:
            Any: Input with ``nodes`` at the top level.
        """
        if isinstance(data, dict) and "nodes" not in data and isinstance(data.get("tree"), dict):
            data = {**data, "nodes": data["tree"].get("nodes")}
            data.pop("tree")
        return data

    @model_validator(mode="after")
    def _validate_arena_is_a_tree(self) -> TreeModel:
        """Check that every node is reachable exactly once from the root.

        Returns:
            TreeModel: The validated model.

        Raises:
            MalformedTreeError: On out-of-range child indices, cycles or shared children,
                or negative class counts in a leaf.
        """
        node_count = len(self.nodes)
        visited: set[int] = set()
        stack = [0]
        while stack:
            node_index = stack.pop()
            if node_index in visited:
                raise MalformedTreeError(
                    f"Node {node_index} is reachable more than once (cycle or shared child)",
                    node_index=node_index,
                )
            visited.add(node_index)
            node = self.nodes[node_index]
            if isinstance(node, LeafNode):
                if any(count < 0 for count in node.value):
                    raise MalformedTreeError(
                        f"Leaf {node_index} has negative class counts {node.value}", node_index=node_index
                    )
                continue
            for side, child in (("left", node.left), ("right", node.right)):
                if not 0 <= child < node_count:
                    raise MalformedTreeError(
                        f"Node {node_index} has {side} child {child} outside [0, {node_count})",
                        node_index=node_index,
                    )
            stack.extend((node.right, node.left))
        return self

    @property
    def leaf_count(self) -> int:
        """int: Number of leaves reachable from the root."""
        return sum(1 for index in self._reachable() if isinstance(self.nodes[index], LeafNode))

    @property
    def depth(self) -> int:
        """int: Number of splits on the longest root-to-leaf path."""
        deepest = 0
        stack = [(0, 0)]
        while stack:
            node_index, level = stack.pop()
            node = self.nodes[node_index]
            if isinstance(node, LeafNode):
                deepest = max(deepest, level)
            else:
                stack.extend(((node.left, level + 1), (node.right, level + 1)))
        return deepest

    @property
    def max_feature_index(self) -> int:
        """int: Largest feature index read by any split, -1 for a single-leaf tree."""
        indices = [self.nodes[i].feature_index for i in self._reachable() if isinstance(self.nodes[i], InternalNode)]
        return max(indices, default=-1)

    def _reachable(self) -> list[int]:
        reachable: list[int] = []
        stack = [0]
        while stack:
            node_index = stack.pop()
            reachable.append(node_index)
            node = self.nodes[node_index]
            if isinstance(node, InternalNode):
                stack.extend((node.right, node.left))
        return reachable


# ---------------------------------------------------------------------------
# Prediction output
# ---------------------------------------------------------------------------


class PathStep(BaseModel):
    """One decision taken on the way from the root to a leaf.

    Attributes:
        feature (str): Human-readable feature label, e.g. `"Academic Pressure"`
            or `"Gender_Male"`.
        value (float): Observed feature value.
        threshold (float): Split threshold at this node.
        direction (Direction): `"left"` when `value <= threshold`, else `"right"`.
    """

    feature: str = Field(description="Human-readable feature label.")
    value: float = Field(description="Observed feature value.")
    threshold: float = Field(description="Split threshold at this node.")
    direction: Direction = Field(description="'left' when value <= threshold, else 'right'.")

    def __str__(self) -> str:
        operator = "<=" if self.direction == "left" else ">"
        return f"{self.feature} = {self.value:g} {operator} {self.threshold:g}"


class PredictionResult(BaseModel):
    """Outcome of evaluating the tree against one record.

    Serializes with the field names ``class`` and ``riskLevel`` that the
    front end expects.

    Attributes:
        probability (float): Positive-class share at the reached leaf.
        predicted_class (int): 1 when `probability >= tree.threshold`, else 0.
        risk_level (RiskLevel): `"HIGH"` for class 1, `"LOW"` for class 0.
        path (list[PathStep]): Decisions from the root to the leaf.
        leaf_index (int): Arena index of the reached leaf.
        warnings (dict[str, str]): Advisory per-field messages (out-of-range
            inputs that did not block the prediction).
    """

    model_config = ConfigDict(validate_by_name=True, validate_by_alias=True, serialize_by_alias=True)

    probability: float = Field(ge=0.0, le=1.0, description="Positive-class probability at the leaf.")
    predicted_class: Literal[0, 1] = Field(alias="class", description="Predicted class, 0 or 1.")
    risk_level: RiskLevel = Field(alias="riskLevel", description="'HIGH' for class 1, 'LOW' for class 0.")
    path: list[PathStep] = Field(default_factory=list, description="Decisions from the root to the leaf.")
    leaf_index: int = Field(default=0, ge=0, description="Arena index of the reached leaf.")
    warnings: dict[str, str] = Field(default_factory=dict, description="Advisory per-field messages.")

    @model_validator(mode="after")
    def _validate_risk_level_matches_class(self) -> PredictionResult:
        """Keep `risk_level` consistent with `predicted_class`.

        Returns:
            PredictionResult: The validated model instance.

        Raises:
            ValueError: If the risk level does not match the class.
        """
        expected = "HIGH" if self.predicted_class == 1 else "LOW"
        if self.risk_level != expected:
            raise ValueError(f"risk_level {self.risk_level!r} does not match predicted_class {self.predicted_class}")
        return self


class FieldIssue(BaseModel):
    """A problem with one input field.

    Attributes:
        kind (IssueKind): `"not_a_number"` or `"out_of_range"`.
        message (str): Message shown next to the field.
    """

    kind: IssueKind
    message: str = Field(min_length=1)


class ValidationReport(BaseModel):
    """Field-keyed validation messages returned instead of a prediction.

    Attributes:
        issues (dict[str, FieldIssue]): Issues keyed by column name.

    Examples:
        >>> report = ValidationReport(issues={"Age": FieldIssue(kind="not_a_number", message="Must be a number")})
        >>> report.messages
        {'Age': 'Must be a number'}
    """

    issues: dict[str, FieldIssue] = Field(min_length=1)

    @property
    def messages(self) -> dict[str, str]:
        """dict[str, str]: Column name to message."""
        return {column: issue.message for column, issue in self.issues.items()}
