"""Right panel: live sliders (world size, tick rate, flow rules), play/pause, tap toggle, save/update settings, config dropdown."""

import pygame
from typing import Callable

import config
from fluid.constants import DEFAULT_HEIGHT, DEFAULT_SOURCE_INTERVAL, DEFAULT_TICK_RATE, DEFAULT_WIDTH
from fluid.scenario import RULE_DEFAULTS
from ui import tooltips

FONT_SIZE = 16
TOOLTIP_FONT_SIZE = 19
TOOLTIP_SMALL_FONT_SIZE = 16
LABEL_COLOR = (200, 200, 200)
HINT_COLOR = (130, 130, 130)
SLIDER_COLOR = (100, 100, 100)
KNOB_COLOR = (180, 180, 180)
BUTTON_COLOR = (60, 60, 60)
BUTTON_HOVER = (80, 80, 80)

VIEW_MODE_LABELS = {"default": "Depth", "dots": "Dots", "level_bw": "Level (b/w)"}
VIEW_MODE_ORDER = ("default", "dots", "level_bw")

# key -> (label, lo, hi, scale). Slider positions are ints; stored value = int / scale.
SLIDERS = {
    "width": ("World width", 8, 128, 1),
    "height": ("World height", 8, 96, 1),
    "render_scale": ("Render scale", 1, 4, 1),
    "tick_rate": ("Tick rate (1–60)", 1, 60, 1),
    "source_interval": ("Tap interval (ticks)", 1, 30, 1),
    "gravity_rate": ("Gravity rate (×0.01)", 5, 100, 100),
    "lateral_coeff": ("Spread coefficient (×0.01)", 0, 50, 100),
    "diagonal_rate": ("Diagonal rate (×0.01)", 0, 100, 100),
}
RULE_SLIDERS = ("gravity_rate", "lateral_coeff", "diagonal_rate")


class ParamPanel:
    """State: params dict; draw and handle events. Save and Restart callbacks."""

    def __init__(
        self,
        rect: pygame.Rect,
        initial: dict,
        on_save: Callable[[], None],
        on_restart: Callable[[], None],
    ) -> None:
        self.rect = rect
        self.params = {
            "width": initial.get("width", DEFAULT_WIDTH),
            "height": initial.get("height", DEFAULT_HEIGHT),
            "tick_rate": initial.get("tick_rate", DEFAULT_TICK_RATE),
            "source_interval": initial.get("source_interval", DEFAULT_SOURCE_INTERVAL),
            "gravity_rate": initial.get("gravity_rate", RULE_DEFAULTS["gravity_rate"]),
            "lateral_coeff": initial.get("lateral_coeff", RULE_DEFAULTS["lateral_coeff"]),
            "diagonal_rate": initial.get("diagonal_rate", RULE_DEFAULTS["diagonal_rate"]),
            "seed": initial.get("seed", -1),
            "lock_seed": initial.get("lock_seed", False),
            "view_mode": initial.get("view_mode", "default"),
            "render_scale": initial.get("render_scale", 1),
            "sources_enabled": initial.get("sources_enabled", True),
            "config_name": initial.get("config_name", ""),
            "paused": True,
        }
        # Passed through to saved configs untouched; edited only in JSON.
        self._scenario = {
            k: initial[k] for k in ("sources", "obstacles", "ledges", "lateral_threshold", "spread_distance", "capacity")
            if k in initial
        }
        self.on_save = on_save
        self.on_restart = on_restart
        self.on_load_config = initial.get("on_load_config")
        self._selected_config: tuple[int, str] | None = initial.get("selected_config")
        self._font = None
        self._tooltip_font = None
        self._tooltip_small_font = None
        self._slider_rects: dict = {}
        self._button_rects: dict = {}
        self._tooltip_rects: dict[str, pygame.Rect] = {}
        self._dragging: str | None = None
        self._seed_focus = False
        self._seed_buffer = ""
        self._config_name_focus = False
        self._config_name_buffer = ""
        self._dropdown_expanded = False
        self._dropdown_option_rects: list[tuple[str, pygame.Rect]] = []
        self._config_dropdown_expanded = False
        self._config_dropdown_option_rects: list[tuple[tuple[int, str], pygame.Rect]] = []
        self._hover_tooltip_text = None
        self._last_actual_seed: int | None = None

    def _ensure_font(self) -> pygame.font.Font:
        if self._font is None:
            self._font = pygame.font.Font(None, FONT_SIZE)
        return self._font

    def _ensure_tooltip_fonts(self) -> tuple[pygame.font.Font, pygame.font.Font]:
        if self._tooltip_font is None:
            self._tooltip_font = pygame.font.Font(None, TOOLTIP_FONT_SIZE)
            self._tooltip_small_font = pygame.font.Font(None, TOOLTIP_SMALL_FONT_SIZE)
        return self._tooltip_font, self._tooltip_small_font

    def get_params(self) -> dict:
        return self.params.copy()

    def rules(self) -> dict:
        """Step keyword arguments from the sliders plus the JSON-only rule keys."""
        out = {k: self._scenario.get(k, v) for k, v in RULE_DEFAULTS.items()}
        for k in RULE_SLIDERS:
            out[k] = self.params[k]
        return out

    def _slider_row(self, surface: pygame.Surface, key: str, x: int, y: int, slider_w: int) -> int:
        font = self._ensure_font()
        label, lo, hi, scale = SLIDERS[key]
        pos = max(lo, min(hi, int(round(self.params[key] * scale))))
        row_y = y
        surface.blit(font.render(label, True, LABEL_COLOR), (x, y))
        y += 18
        sr = _draw_slider(surface, x, y, slider_w, 12, pos, lo, hi)
        value_str = str(pos) if scale == 1 else f"{pos / scale:.2f}"
        _draw_slider_value(surface, font, x + slider_w + 4, y, value_str)
        self._slider_rects[key] = (sr, lo, hi)
        if key in tooltips.PARAM_TOOLTIPS:
            self._tooltip_rects[key] = pygame.Rect(x, row_y, self.rect.width - 16, 18 + 12 + 4)
        return y + 12 + 4

    def _toggle(self, surface: pygame.Surface, key: str, text: str, x: int, y: int, h: int = 18) -> int:
        font = self._ensure_font()
        box = pygame.Rect(x, y + 2, 14, 14)
        pygame.draw.rect(surface, KNOB_COLOR if self.params[key] else SLIDER_COLOR, box)
        pygame.draw.rect(surface, LABEL_COLOR, box, 1)
        surface.blit(font.render(text, True, LABEL_COLOR), (x + 18, y + 2))
        self._button_rects[key] = box.union(pygame.Rect(x, y, 18 + font.size(text)[0], h))
        return self._button_rects[key].right

    def _button(self, surface: pygame.Surface, key: str, text: str, rect: pygame.Rect) -> None:
        font = self._ensure_font()
        color = BUTTON_HOVER if rect.collidepoint(pygame.mouse.get_pos()) else BUTTON_COLOR
        pygame.draw.rect(surface, color, rect)
        surface.blit(font.render(text, True, LABEL_COLOR), (rect.x + 6, rect.y + 4))
        self._button_rects[key] = rect

    def draw(self, surface: pygame.Surface, tick_count: int = 0, actual_used_seed: int | None = None, volume: float = 0.0) -> None:
        font = self._ensure_font()
        x, y = self.rect.x + 8, self.rect.y + 6
        line_h = 18
        gap = 4
        self._slider_rects.clear()
        self._button_rects.clear()
        self._tooltip_rects.clear()
        slider_w = self.rect.width - 16 - 44  # leave 44px for value text

        surface.blit(font.render(f"Tick: {tick_count}   Volume: {volume:.2f}", True, LABEL_COLOR), (x, y))
        y += line_h
        surface.blit(font.render("LMB water  RMB wall  MMB erase", True, HINT_COLOR), (x, y))
        y += line_h + gap

        # Seed (text input): integer or -1 for random ledges each run
        surface.blit(font.render("Seed", True, LABEL_COLOR), (x, y))
        y += line_h
        self._seed_rect = pygame.Rect(x, y, 140, 18)
        pygame.draw.rect(surface, SLIDER_COLOR, self._seed_rect)
        if self._seed_focus:
            display_str = self._seed_buffer
        elif self.params["seed"] == -1 and actual_used_seed is not None:
            display_str = f"-1 ({actual_used_seed})"
        else:
            display_str = str(self.params["seed"])
        surface.blit(font.render(display_str[:20], True, LABEL_COLOR), (self._seed_rect.x + 4, self._seed_rect.y + 1))
        y += 18 + gap

        # View mode dropdown
        surface.blit(font.render("View", True, LABEL_COLOR), (x, y))
        y += line_h
        drop_w, drop_h = 160, 18
        self._dropdown_rect = pygame.Rect(x, y, drop_w, drop_h)
        pygame.draw.rect(surface, SLIDER_COLOR, self._dropdown_rect)
        pygame.draw.polygon(surface, LABEL_COLOR, [(x + drop_w - 12, y + 4), (x + drop_w - 6, y + 4), (x + drop_w - 9, y + 11)])
        current = VIEW_MODE_LABELS.get(self.params["view_mode"], "Depth")
        surface.blit(font.render(current, True, LABEL_COLOR), (self._dropdown_rect.x + 4, self._dropdown_rect.y + 2))
        y += drop_h + gap
        self._dropdown_option_rects.clear()
        if self._dropdown_expanded:
            for mode in VIEW_MODE_ORDER:
                opt_rect = pygame.Rect(x, y, drop_w, drop_h)
                pygame.draw.rect(surface, BUTTON_HOVER if opt_rect.collidepoint(pygame.mouse.get_pos()) else BUTTON_COLOR, opt_rect)
                surface.blit(font.render(VIEW_MODE_LABELS[mode], True, LABEL_COLOR), (opt_rect.x + 4, opt_rect.y + 2))
                self._dropdown_option_rects.append((mode, opt_rect))
                y += drop_h + 1
        y += gap

        for key in SLIDERS:
            y = self._slider_row(surface, key, x, y, slider_w)

        self._toggle(surface, "sources_enabled", "Taps on", x, y)
        y += 18 + gap

        # Start / Pause / Resume, Restart, Lock Seed
        btn_h = 26
        if self.params["paused"]:
            text = "Start" if tick_count == 0 else "Resume"
        else:
            text = "Pause"
        self._button(surface, "pause", text, pygame.Rect(x, y, 100, btn_h))
        self._button(surface, "restart", "Restart", pygame.Rect(x + 104, y, 110, btn_h))
        self._toggle(surface, "lock_seed", "Lock Seed", x + 104 + 110 + 6, y + 2, btn_h)
        y += btn_h + gap

        # Config dropdown (saved configs: "Name (seed)")
        surface.blit(font.render("Config", True, LABEL_COLOR), (x, y))
        y += line_h
        drop_w = 200
        self._config_dropdown_rect = pygame.Rect(x, y, drop_w, drop_h)
        pygame.draw.rect(surface, SLIDER_COLOR, self._config_dropdown_rect)
        pygame.draw.polygon(surface, LABEL_COLOR, [(x + drop_w - 12, y + 4), (x + drop_w - 6, y + 4), (x + drop_w - 9, y + 11)])
        if self._selected_config is not None:
            current_config_str = f"{self._selected_config[1]} ({self._selected_config[0]})"
        else:
            current_config_str = "—"
        surface.blit(font.render(current_config_str[:28], True, LABEL_COLOR), (x + 4, y + 2))
        y += drop_h + gap
        self._config_dropdown_option_rects.clear()
        if self._config_dropdown_expanded:
            for seed, name in config.list_configs():
                opt_rect = pygame.Rect(x, y, drop_w, drop_h)
                pygame.draw.rect(surface, BUTTON_HOVER if opt_rect.collidepoint(pygame.mouse.get_pos()) else BUTTON_COLOR, opt_rect)
                surface.blit(font.render(f"{name} ({seed})"[:28], True, LABEL_COLOR), (opt_rect.x + 4, opt_rect.y + 2))
                self._config_dropdown_option_rects.append(((seed, name), opt_rect))
                y += drop_h + 1
        y += gap

        # Name field, Save/Update config, and Delete config (when current config exists)
        self._last_actual_seed = actual_used_seed
        surface.blit(font.render("Name", True, LABEL_COLOR), (x, y))
        y += line_h
        name_w = 140
        self._config_name_rect = pygame.Rect(x, y, name_w, 18)
        pygame.draw.rect(surface, SLIDER_COLOR, self._config_name_rect)
        display_name = self._config_name_buffer if self._config_name_focus else (self.params.get("config_name") or "")
        surface.blit(font.render(display_name[:24], True, LABEL_COLOR), (x + 4, y + 1))
        effective_name = display_name.strip()
        exists = actual_used_seed is not None and effective_name != "" and config.config_exists(actual_used_seed, effective_name)
        save_btn_w = 120
        self._button(surface, "save", "Update config" if exists else "Save config", pygame.Rect(x + name_w + 6, y, save_btn_w, btn_h))
        if exists:
            self._button(surface, "delete_config", "Delete config", pygame.Rect(x + name_w + 6 + save_btn_w + 6, y, 90, btn_h))

    def update_hover_tooltip(self, pos: tuple[int, int]) -> None:
        self._hover_tooltip_text = None
        for key, r in self._tooltip_rects.items():
            if r.collidepoint(pos):
                self._hover_tooltip_text = tooltips.PARAM_TOOLTIPS.get(key)
                return

    def draw_tooltip(self, surface: pygame.Surface) -> None:
        tf, sf = self._ensure_tooltip_fonts()
        tooltips.draw_tooltip(surface, tf, sf, self._hover_tooltip_text, pygame.mouse.get_pos())

    def _release_text_focus(self) -> None:
        if self._seed_focus:
            self._parse_seed_buffer()
        self._seed_focus = False
        if self._config_name_focus:
            self._apply_config_name_buffer()
        self._config_name_focus = False

    def _click_button(self, key: str) -> None:
        if key == "pause":
            self.params["paused"] = not self.params["paused"]
        elif key == "restart":
            self.on_restart()
        elif key in ("lock_seed", "sources_enabled"):
            self.params[key] = not self.params[key]
        elif key == "save":
            self.on_save()
        elif key == "delete_config":
            effective = (self.params.get("config_name") or "").strip() or "unnamed"
            seed = self._last_actual_seed
            if seed is not None:
                key_deleted = (seed, config._sanitize_name(effective))
                config.delete_config(seed, effective)
                if self._selected_config == key_deleted:
                    self._selected_config = None

    def handle_event(self, event: pygame.event.Event) -> bool:
        """Returns True if event was consumed."""
        if event.type == pygame.MOUSEBUTTONDOWN:
            if not self.rect.collidepoint(event.pos):
                self._release_text_focus()
                self._dropdown_expanded = False
                self._config_dropdown_expanded = False
                return False
            if getattr(self, "_seed_rect", None) and self._seed_rect.collidepoint(event.pos):
                self._release_text_focus()
                self._seed_focus = True
                self._seed_buffer = str(self.params["seed"])
                return True
            if getattr(self, "_config_name_rect", None) and self._config_name_rect.collidepoint(event.pos):
                self._release_text_focus()
                self._config_name_focus = True
                self._config_name_buffer = self.params.get("config_name") or ""
                return True
            self._release_text_focus()
            if getattr(self, "_dropdown_rect", None) and self._dropdown_rect.collidepoint(event.pos):
                self._dropdown_expanded = not self._dropdown_expanded
                self._config_dropdown_expanded = False
                return True
            for mode, opt_rect in self._dropdown_option_rects:
                if opt_rect.collidepoint(event.pos):
                    self.params["view_mode"] = mode
                    self._dropdown_expanded = False
                    return True
            self._dropdown_expanded = False
            if getattr(self, "_config_dropdown_rect", None) and self._config_dropdown_rect.collidepoint(event.pos):
                self._config_dropdown_expanded = not self._config_dropdown_expanded
                return True
            for (seed, name), opt_rect in self._config_dropdown_option_rects:
                if opt_rect.collidepoint(event.pos):
                    self._selected_config = (seed, name)
                    self._config_dropdown_expanded = False
                    if self.on_load_config:
                        self.on_load_config(seed, name)
                    return True
            self._config_dropdown_expanded = False
            for key, (slider_rect, lo, hi) in self._slider_rects.items():
                if slider_rect.collidepoint(event.pos):
                    self._dragging = key
                    self._set_slider_value(key, event.pos, slider_rect, lo, hi)
                    return True
            for key, btn_rect in self._button_rects.items():
                if btn_rect.collidepoint(event.pos):
                    self._click_button(key)
                    return True
            return True
        if event.type == pygame.KEYDOWN:
            if self._seed_focus:
                if event.key == pygame.K_RETURN:
                    self._seed_focus = False
                    self._parse_seed_buffer()
                elif event.key == pygame.K_BACKSPACE:
                    self._seed_buffer = self._seed_buffer[:-1]
                elif event.unicode and (event.unicode.isdigit() or (event.unicode == "-" and not self._seed_buffer)):
                    self._seed_buffer += event.unicode
                return True
            if self._config_name_focus:
                if event.key == pygame.K_RETURN:
                    self._config_name_focus = False
                    self._apply_config_name_buffer()
                elif event.key == pygame.K_BACKSPACE:
                    self._config_name_buffer = self._config_name_buffer[:-1]
                elif event.unicode and len(self._config_name_buffer) < 48:
                    self._config_name_buffer += event.unicode
                return True
            if event.key == pygame.K_SPACE:
                self.params["paused"] = not self.params["paused"]
                return True
        elif event.type == pygame.MOUSEBUTTONUP:
            if self._dragging is not None:
                self._dragging = None
                return True
        elif event.type == pygame.MOUSEMOTION:
            self.update_hover_tooltip(event.pos)
            if self._dragging is not None and self._dragging in self._slider_rects:
                sr, lo, hi = self._slider_rects[self._dragging]
                self._set_slider_value(self._dragging, event.pos, sr, lo, hi)
                return True
        return False

    def _parse_seed_buffer(self) -> None:
        s = self._seed_buffer.strip()
        if not s:
            return
        try:
            self.params["seed"] = int(s)
        except ValueError:
            pass
        self._seed_buffer = ""

    def _apply_config_name_buffer(self) -> None:
        self.params["config_name"] = self._config_name_buffer.strip()[:64]
        self._config_name_buffer = ""

    def apply_config(self, cfg: dict) -> None:
        """Load a config dict into panel params (e.g. after loading a saved config)."""
        world = cfg.get("world", {})
        self.params["width"] = world.get("width", self.params["width"])
        self.params["height"] = world.get("height", self.params["height"])
        for k in (
            "tick_rate", "source_interval", "gravity_rate", "lateral_coeff", "diagonal_rate",
            "seed", "lock_seed", "render_scale", "view_mode", "sources_enabled", "config_name",
        ):
            if k in cfg:
                self.params[k] = cfg[k]
        if self.params["view_mode"] not in VIEW_MODE_LABELS:
            self.params["view_mode"] = "default"
        if "actual_seed_used" in cfg:
            self.params["seed"] = cfg["actual_seed_used"]
        for k in ("sources", "obstacles", "ledges", "lateral_threshold", "spread_distance", "capacity"):
            if k in cfg:
                self._scenario[k] = cfg[k]

    def clear_layout(self) -> None:
        """Drop JSON-placed taps and walls (they are tied to the old world size)."""
        self._scenario.pop("sources", None)
        self._scenario.pop("obstacles", None)

    def set_selected_config(self, seed: int, name: str) -> None:
        """Called after save so dropdown shows the current config."""
        self._selected_config = (seed, name)

    def _set_slider_value(self, key: str, pos: tuple[int, int], slider_rect: pygame.Rect, lo: int, hi: int) -> None:
        t = (pos[0] - slider_rect.x) / max(1, slider_rect.width - 8)
        t = max(0, min(1, t))
        val = int(lo + t * (hi - lo))
        scale = SLIDERS[key][3]
        self.params[key] = val / scale if scale != 1 else val

    def scenario_config(self) -> dict:
        """Config dict for fluid.scenario.build_scenario and config.save_config."""
        out = {
            "world": {"width": self.params["width"], "height": self.params["height"]},
            "tick_rate": self.params["tick_rate"],
            "source_interval": self.params["source_interval"],
            "sources_enabled": self.params["sources_enabled"],
            "seed": self.params["seed"],
            "lock_seed": self.params["lock_seed"],
            "render_scale": self.params["render_scale"],
            "view_mode": self.params.get("view_mode", "default"),
            **self._scenario,
            **self.rules(),
        }
        out.setdefault("sources", [[0, self.params["width"] // 2]])
        return out


def _draw_slider(
    surface: pygame.Surface, x: int, y: int, w: int, h: int, value: int, vmin: int, vmax: int
) -> pygame.Rect:
    rect = pygame.Rect(x, y, w, h)
    pygame.draw.rect(surface, SLIDER_COLOR, rect)
    t = (value - vmin) / max(1, vmax - vmin)
    knob_x = x + 4 + int(t * (w - 8))
    pygame.draw.rect(surface, KNOB_COLOR, (knob_x, y, 8, h))
    return rect


def _draw_slider_value(
    surface: pygame.Surface, font: pygame.font.Font, x: int, y: int, value_str: str
) -> None:
    surface.blit(font.render(value_str, True, LABEL_COLOR), (x, y))
