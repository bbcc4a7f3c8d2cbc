"""Per-step style overrides and their resolution against funnel defaults.

Every property resolves independently through the same chain:
step design override -> funnel setting -> fallback constant. The public
renderer uses this module unchanged so authored and live pages match.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Dict, Optional, Any

from .media import aspect_ratio


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _is_set(value) -> bool:
    return value is not None and value != ""


@dataclass
class FunnelSettings:
    """Funnel-wide defaults shared by every step."""
    primary_color: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    font_family: Optional[str] = None
    font_size: Optional[str] = None
    border_radius: Optional[int] = None
    button_text: Optional[str] = None
    logo_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self) if getattr(self, f.name) is not None}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "FunnelSettings":
        data = data or {}
        return cls(**{f.name: data.get(f.name) for f in fields(cls)})


DEFAULT_FUNNEL_SETTINGS = FunnelSettings(
    primary_color="#8B5CF6",
    background_color="#0f0f14",
    font_family="Inter",
    button_text="Get Started",
)


@dataclass
class StepDesign:
    """Style overrides for one step; None means inherit."""
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    button_color: Optional[str] = None
    button_text_color: Optional[str] = None
    font_size: Optional[str] = None  # small, medium, large
    font_family: Optional[str] = None
    border_radius: Optional[int] = None
    padding: Optional[int] = None

    # Image
    image_url: Optional[str] = None
    image_size: Optional[str] = None  # S, M, L, XL
    image_position: Optional[str] = None  # top, bottom, background
    image_overlay: Optional[bool] = None
    image_overlay_color: Optional[str] = None
    image_overlay_opacity: Optional[float] = None

    # Background gradient
    use_gradient: Optional[bool] = None
    gradient_from: Optional[str] = None
    gradient_to: Optional[str] = None
    gradient_direction: Optional[str] = None

    # Button gradient
    use_button_gradient: Optional[bool] = None
    button_gradient_from: Optional[str] = None
    button_gradient_to: Optional[str] = None
    button_gradient_direction: Optional[str] = None

    # Inputs
    input_bg: Optional[str] = None
    input_text_color: Optional[str] = None
    input_border: Optional[str] = None
    input_border_width: Optional[int] = None
    input_radius: Optional[int] = None
    input_placeholder_color: Optional[str] = None
    input_show_icon: Optional[bool] = None

    # Option cards
    option_card_bg: Optional[str] = None
    option_card_border: Optional[str] = None
    option_card_border_width: Optional[int] = None
    option_card_radius: Optional[int] = None
    option_card_hover_effect: Optional[str] = None

    def merged(self, partial: Dict[str, Any]) -> "StepDesign":
        """New design with ``partial`` (snake or camel keys) applied."""
        known = {f.name for f in fields(self)}
        by_camel = {_camel(name): name for name in known}
        updates = {}
        for key, value in partial.items():
            name = key if key in known else by_camel.get(key)
            if name is None:
                raise KeyError(f"Unknown design property: {key}")
            updates[name] = value
        return replace(self, **updates)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape, camelCase keys, unset properties omitted."""
        return {
            _camel(f.name): getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not None
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "StepDesign":
        data = data or {}
        values = {}
        for f in fields(cls):
            if f.name in data:
                values[f.name] = data[f.name]
            elif _camel(f.name) in data:
                values[f.name] = data[_camel(f.name)]
        return cls(**values)


FALLBACK_TEXT_COLOR = "#ffffff"
FALLBACK_BUTTON_COLOR = "#8B5CF6"
FALLBACK_BUTTON_TEXT_COLOR = "#ffffff"
FALLBACK_BACKGROUND_COLOR = "#000000"
FALLBACK_FONT_FAMILY = "system-ui"
FALLBACK_FONT_SIZE = "medium"
FALLBACK_BORDER_RADIUS = 12
FALLBACK_BUTTON_TEXT = "Get Started"

FONT_SIZE_SCALE = {
    "small": 0.875,
    "medium": 1.0,
    "large": 1.125,
}

# resolved property -> (funnel setting or None, fallback)
_INHERITED = {
    "text_color": ("text_color", FALLBACK_TEXT_COLOR),
    "button_color": ("primary_color", FALLBACK_BUTTON_COLOR),
    "button_text_color": (None, FALLBACK_BUTTON_TEXT_COLOR),
    "background_color": ("background_color", FALLBACK_BACKGROUND_COLOR),
    "font_family": ("font_family", FALLBACK_FONT_FAMILY),
    "font_size": ("font_size", FALLBACK_FONT_SIZE),
    "border_radius": ("border_radius", FALLBACK_BORDER_RADIUS),
    "padding": (None, 24),
    "image_url": (None, ""),
    "image_size": (None, "M"),
    "image_position": (None, "top"),
    "image_overlay": (None, False),
    "image_overlay_color": (None, "#000000"),
    "image_overlay_opacity": (None, 0.5),
    "use_gradient": (None, False),
    "gradient_direction": (None, "to bottom"),
    "use_button_gradient": (None, False),
    "button_gradient_direction": (None, "135deg"),
    "input_bg": (None, "#ffffff"),
    "input_text_color": (None, "#000000"),
    "input_border": (None, "#e5e7eb"),
    "input_border_width": (None, 1),
    "input_radius": (None, 12),
    "input_placeholder_color": (None, "#9ca3af"),
    "input_show_icon": (None, True),
    "option_card_bg": (None, "rgba(255,255,255,0.05)"),
    "option_card_border": (None, "rgba(255,255,255,0.1)"),
    "option_card_border_width": (None, 1),
    "option_card_radius": (None, 12),
    "option_card_hover_effect": (None, "scale"),
}


@dataclass(frozen=True)
class ResolvedDesign:
    """Fully resolved style values; no property is ever None."""
    text_color: str
    button_color: str
    button_text_color: str
    background_color: str
    font_family: str
    font_size: str
    border_radius: int
    padding: int
    image_url: str
    image_size: str
    image_position: str
    image_overlay: bool
    image_overlay_color: str
    image_overlay_opacity: float
    use_gradient: bool
    gradient_from: str
    gradient_to: str
    gradient_direction: str
    use_button_gradient: bool
    button_gradient_from: str
    button_gradient_to: str
    button_gradient_direction: str
    input_bg: str
    input_text_color: str
    input_border: str
    input_border_width: int
    input_radius: int
    input_placeholder_color: str
    input_show_icon: bool
    option_card_bg: str
    option_card_border: str
    option_card_border_width: int
    option_card_radius: int
    option_card_hover_effect: str
    logo_url: str = ""
    sources: Dict[str, str] = field(default_factory=dict, compare=False)

    @property
    def font_scale(self) -> float:
        return FONT_SIZE_SCALE.get(self.font_size, 1.0)

    @property
    def image_aspect_ratio(self) -> str:
        return aspect_ratio(self.image_size)

    @property
    def background_css(self) -> str:
        if self.use_gradient:
            return f"linear-gradient({self.gradient_direction}, {self.gradient_from}, {self.gradient_to})"
        return self.background_color

    @property
    def button_background_css(self) -> str:
        if self.use_button_gradient:
            return (
                f"linear-gradient({self.button_gradient_direction}, "
                f"{self.button_gradient_from}, {self.button_gradient_to})"
            )
        return self.button_color


def resolve_design(design: Optional[StepDesign], settings: Optional[FunnelSettings]) -> ResolvedDesign:
    """Resolve every style property for a step."""
    design = design or StepDesign()
    settings = settings or FunnelSettings()

    values: Dict[str, Any] = {}
    sources: Dict[str, str] = {}
    for name, (setting_name, fallback) in _INHERITED.items():
        override = getattr(design, name)
        inherited = getattr(settings, setting_name) if setting_name else None
        if _is_set(override):
            values[name], sources[name] = override, "step"
        elif _is_set(inherited):
            values[name], sources[name] = inherited, "funnel"
        else:
            values[name], sources[name] = fallback, "default"

    # Gradient endpoints inherit from the colour they replace
    values["gradient_from"] = design.gradient_from or values["background_color"]
    values["gradient_to"] = design.gradient_to or values["gradient_from"]
    values["button_gradient_from"] = design.button_gradient_from or values["button_color"]
    values["button_gradient_to"] = design.button_gradient_to or values["button_gradient_from"]

    return ResolvedDesign(logo_url=settings.logo_url or "", sources=sources, **values)


def resolve_button_text(content: Dict[str, Any], settings: Optional[FunnelSettings]) -> str:
    """Step button label -> funnel default label -> fallback."""
    if _is_set(content.get("button_text")):
        return content["button_text"]
    if settings and _is_set(settings.button_text):
        return settings.button_text
    return FALLBACK_BUTTON_TEXT
