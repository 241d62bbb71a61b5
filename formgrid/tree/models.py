"""Field node models.

A form is an ordered list of `FieldNode` values. Container and panel nodes own
an ordered list of child nodes; every other kind is a leaf. Kind-specific
attributes live in a configuration model selected by the node's kind, so each
branch of the compiler sees a concrete type instead of an open dictionary.
"""

import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, model_validator
from pydantic.alias_generators import to_camel

from formgrid.condition import Condition

GRID_COLUMNS = 12


class FieldKind(str, Enum):
    """Kinds of field node that can be placed on a form."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    CHART = "chart"
    RICH_TEXT = "rich_text"
    NAVIGATION = "navigation"
    DISPLAY = "display"
    CONTAINER = "container"
    PANEL = "panel"

    @property
    def is_container(self) -> bool:
        """Whether nodes of this kind own children."""
        return self in CONTAINER_KINDS


CONTAINER_KINDS = frozenset({FieldKind.CONTAINER, FieldKind.PANEL})


class WidthClass(str, Enum):
    """Horizontal share of the 12-column grid a node occupies."""

    QUARTER = "quarter"
    HALF = "half"
    THREE_QUARTER = "three_quarter"
    FULL = "full"

    @property
    def span(self) -> int:
        """Number of grid columns covered (3, 6, 9 or 12)."""
        return _SPANS[self]

    @property
    def percent(self) -> int:
        """Share of the row as a percentage."""
        return round(self.span / GRID_COLUMNS * 100)

    def next(self) -> "WidthClass":
        """Next class in the resize cycle; full wraps to quarter."""
        return _RESIZE_CYCLE[self]

    @classmethod
    def from_span(cls, span: int) -> "WidthClass":
        """Width class covering `span` columns, rounding up to the next class."""
        for width in (cls.QUARTER, cls.HALF, cls.THREE_QUARTER):
            if span <= width.span:
                return width
        return cls.FULL


_SPANS = {
    WidthClass.QUARTER: 3,
    WidthClass.HALF: 6,
    WidthClass.THREE_QUARTER: 9,
    WidthClass.FULL: 12,
}

_RESIZE_CYCLE = {
    WidthClass.QUARTER: WidthClass.HALF,
    WidthClass.HALF: WidthClass.THREE_QUARTER,
    WidthClass.THREE_QUARTER: WidthClass.FULL,
    WidthClass.FULL: WidthClass.QUARTER,
}


# =============================================================================
# Kind-specific configuration
# =============================================================================


class _ConfigBase(BaseModel):
    """Shared settings for configuration models.

    Attributes are written camelCase into the data-shape document and read
    back by either spelling.
    """

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
        "extra": "ignore",
    }

    def to_property(self) -> dict[str, Any]:
        """Attributes to merge into the data-shape property, camelCase."""
        return self.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"kind"}
        )


class StringConfig(_ConfigBase):
    """Free text, formatted text, enumerations and file/signature uploads."""

    kind: Literal["string"] = "string"
    description: str | None = None
    format: str | None = Field(None, description="Format hint: email, date, file...")
    enum: list[str] | None = Field(None, description="Enumerated options")
    accept: str | None = Field(None, description="Accepted MIME types for files")
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)


class NumberConfig(_ConfigBase):
    """Numeric input and ratings."""

    kind: Literal["number"] = "number"
    description: str | None = None
    minimum: int | float | None = None
    maximum: int | float | None = None
    max: int | None = Field(None, ge=1, description="Rating scale size")


class BooleanConfig(_ConfigBase):
    """Checkbox."""

    kind: Literal["boolean"] = "boolean"
    description: str | None = None


class ArrayColumn(BaseModel):
    """One column of a table field."""

    name: str
    label: str = ""
    type: str = "string"


class ArrayConfig(_ConfigBase):
    """Table of rows sharing the same columns."""

    kind: Literal["array"] = "array"
    description: str | None = None
    columns: list[ArrayColumn] = Field(
        default_factory=lambda: [
            ArrayColumn(name="column1", label="Column 1"),
            ArrayColumn(name="column2", label="Column 2"),
        ]
    )

    def to_property(self) -> dict[str, Any]:
        data = super().to_property()
        data["items"] = {
            "type": "object",
            "properties": {
                column.name: {"type": column.type, "title": column.label or column.name}
                for column in self.columns
            },
        }
        return data


class ChartPoint(BaseModel):
    """A single named value in a chart series."""

    name: str
    value: int | float


class ChartType(str, Enum):
    """Supported chart renderings."""

    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    AREA = "area"


def _default_series() -> list[ChartPoint]:
    return [
        ChartPoint(name="Jan", value=400),
        ChartPoint(name="Feb", value=300),
        ChartPoint(name="Mar", value=600),
        ChartPoint(name="Apr", value=800),
        ChartPoint(name="May", value=500),
    ]


class ChartConfig(_ConfigBase):
    """Read-only chart widget with inline series data."""

    kind: Literal["chart"] = "chart"
    description: str | None = None
    chart_type: ChartType = ChartType.BAR
    data: list[ChartPoint] = Field(default_factory=_default_series)


class RichTextConfig(_ConfigBase):
    """Static heading or paragraph."""

    kind: Literal["rich_text"] = "rich_text"
    text_type: Literal["header", "subheader", "paragraph"] = "paragraph"
    content: str = "Text content"


class NavItem(BaseModel):
    """Entry of a navigation widget."""

    label: str
    url: str = "#"
    active: bool = False


def _default_nav_items() -> list[NavItem]:
    return [
        NavItem(label="Home", active=True),
        NavItem(label="About"),
        NavItem(label="Services"),
        NavItem(label="Contact"),
    ]


class NavigationConfig(_ConfigBase):
    """Navigation bar widget."""

    kind: Literal["navigation"] = "navigation"
    nav_items: list[NavItem] = Field(default_factory=_default_nav_items)
    nav_variant: Literal["horizontal", "vertical"] = "horizontal"


class DisplayConfig(_ConfigBase):
    """Alert or badge."""

    kind: Literal["display"] = "display"
    description: str | None = None
    variant: str = "default"


class ContainerVariant(str, Enum):
    """Container flavours; only sections get visible group chrome."""

    SECTION = "section"
    SUBSECTION = "subsection"
    TABS = "tabs"


class ContainerConfig(_ConfigBase):
    """Grouping container."""

    kind: Literal["container"] = "container"
    description: str | None = None
    variant: ContainerVariant = ContainerVariant.SUBSECTION


class PanelConfig(_ConfigBase):
    """Titled panel with window chrome."""

    kind: Literal["panel"] = "panel"
    description: str | None = None
    collapsible: bool = True
    resizable: bool = True
    initial_state: Literal["normal", "minimized", "maximized"] = "normal"


FieldConfig = Annotated[
    Union[
        StringConfig,
        NumberConfig,
        BooleanConfig,
        ArrayConfig,
        ChartConfig,
        RichTextConfig,
        NavigationConfig,
        DisplayConfig,
        ContainerConfig,
        PanelConfig,
    ],
    Field(discriminator="kind"),
]

CONFIG_MODELS: dict[FieldKind, type[_ConfigBase]] = {
    FieldKind.STRING: StringConfig,
    FieldKind.NUMBER: NumberConfig,
    FieldKind.BOOLEAN: BooleanConfig,
    FieldKind.ARRAY: ArrayConfig,
    FieldKind.CHART: ChartConfig,
    FieldKind.RICH_TEXT: RichTextConfig,
    FieldKind.NAVIGATION: NavigationConfig,
    FieldKind.DISPLAY: DisplayConfig,
    FieldKind.CONTAINER: ContainerConfig,
    FieldKind.PANEL: PanelConfig,
}


def config_model_for(kind: FieldKind | str) -> type[_ConfigBase]:
    """Configuration model class for a field kind."""
    return CONFIG_MODELS[FieldKind(kind)]


def default_config(kind: FieldKind | str) -> _ConfigBase:
    """Fresh default configuration for a field kind."""
    return config_model_for(kind)()


# =============================================================================
# Field node
# =============================================================================


def new_node_id() -> str:
    """Generate a fresh node identity."""
    return f"field_{uuid.uuid4().hex[:12]}"


class FieldNode(BaseModel):
    """Recursive node of the field tree.

    Attributes:
        id: Identity, unique across the whole tree.
        name: Structural name; the data-shape property key.
        label: Display label; the property title.
        kind: Field kind tag.
        config: Kind-specific configuration (its `kind` matches `kind`).
        width: Width class on the 12-column grid.
        row: Row index within the owning list, assigned by the layout engine.
        column: Position within the row, assigned by the layout engine.
        required: Whether the property is listed as required.
        visibility: Condition under which the node is shown.
        readonly: Condition under which the node is disabled.
        children: Owned children; a list for container kinds, None otherwise.
    """

    id: str = Field(default_factory=new_node_id, description="Unique identity")
    name: str = Field(..., min_length=1, description="Data-shape property key")
    label: str = Field("", description="Display label")
    kind: FieldKind = Field(..., description="Field kind tag")
    config: FieldConfig = Field(..., description="Kind-specific configuration")
    width: WidthClass = Field(default=WidthClass.FULL)
    row: int = Field(default=0, ge=0)
    column: int = Field(default=0, ge=0)
    required: bool = False
    visibility: Condition | None = None
    readonly: Condition | None = None
    children: list["FieldNode"] | None = None

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "kind" not in data:
            return data
        data = dict(data)
        kind = FieldKind(data["kind"])
        config = data.get("config")
        if config is None:
            data["config"] = {"kind": kind.value}
        elif isinstance(config, dict) and "kind" not in config:
            data["config"] = {**config, "kind": kind.value}
        if kind.is_container and data.get("children") is None:
            data["children"] = []
        return data

    @model_validator(mode="after")
    def _check_shape(self) -> "FieldNode":
        if self.config.kind != self.kind:
            raise ValueError(
                f"config kind '{self.config.kind}' does not match "
                f"node kind '{self.kind.value}'"
            )
        if not self.kind.is_container and self.children is not None:
            raise ValueError(f"'{self.kind.value}' nodes cannot have children")
        for rule in (self.visibility, self.readonly):
            if rule is not None and rule.field == self.name:
                raise ValueError(f"condition on '{self.name}' references itself")
        return self

    @property
    def is_container(self) -> bool:
        """Whether this node owns children."""
        return self.kind.is_container

    @property
    def title(self) -> str:
        """Label used in documents, falling back to the structural name."""
        return self.label or self.name


__all__ = [
    "GRID_COLUMNS",
    "FieldKind",
    "CONTAINER_KINDS",
    "WidthClass",
    "StringConfig",
    "NumberConfig",
    "BooleanConfig",
    "ArrayColumn",
    "ArrayConfig",
    "ChartType",
    "ChartPoint",
    "ChartConfig",
    "RichTextConfig",
    "NavItem",
    "NavigationConfig",
    "DisplayConfig",
    "ContainerVariant",
    "ContainerConfig",
    "PanelConfig",
    "FieldConfig",
    "CONFIG_MODELS",
    "config_model_for",
    "default_config",
    "new_node_id",
    "FieldNode",
]
