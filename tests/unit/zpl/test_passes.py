from pathlib import Path
from typing import List

import pytest

from src.fonts.resolver import FontNotFoundError
from src.model.primitives import RectPrimitive, TextPrimitive
from src.svg.builder import SvgBuilder
from src.zpl.commands import GraphicBox, tokenize
from src.zpl.passes import (
    FIELD_LOOKBACK_WINDOW,
    draw_box,
    emit_text,
    extract_field_data,
    font_size_for,
    has_recent_field_number,
    next_field_number,
    render_commands,
    render_fields,
    resolve_field_layouts,
)
from src.zpl.state import DrawingState, FieldLayout


@pytest.fixture
def font_file(tmp_path: Path) -> str:
    path = tmp_path / "test.ttf"
    path.write_bytes(b"\x00\x01\x00\x00fake-font")
    return str(path)


@pytest.fixture
def builder(tmp_path: Path) -> SvgBuilder:
    return SvgBuilder(800, 1200, fonts_dir=tmp_path / "no-fonts")


def rects(builder: SvgBuilder) -> List[RectPrimitive]:
    return [p for p in builder.primitives if isinstance(p, RectPrimitive)]


def texts(builder: SvgBuilder) -> List[TextPrimitive]:
    return [p for p in builder.primitives if isinstance(p, TextPrimitive)]


# =============================================================================
# STRUCTURAL QUERIES
# =============================================================================


class TestStructuralQueries:
    def test_next_field_number_direct(self) -> None:
        commands = tokenize("^BCN,80^FN2^FDAB")
        assert next_field_number(commands, 0) == 2

    def test_next_field_number_skips_separators(self) -> None:
        commands = tokenize("^BCN,80^FS^FS^FN7")
        assert next_field_number(commands, 0) == 7

    def test_next_field_number_stops_at_other_command(self) -> None:
        commands = tokenize("^BCN,80^FO1,1^FN7")
        assert next_field_number(commands, 0) is None

    def test_next_field_number_at_end(self) -> None:
        assert next_field_number(tokenize("^BCN,80"), 0) is None

    def test_recent_field_number_within_window(self) -> None:
        commands = tokenize("^FN1^FS^FO1,1^FDx")
        assert has_recent_field_number(commands, 3)

    def test_recent_field_number_outside_window(self) -> None:
        commands = tokenize("^FN1^FS^FO1,1^A0N,20,20^FDx")
        assert not has_recent_field_number(commands, 4)

    def test_recent_field_number_at_start(self) -> None:
        assert not has_recent_field_number(tokenize("^FDx"), 0)


# =============================================================================
# PASS 1
# =============================================================================


class TestExtractFieldData:
    def test_inline_shape(self) -> None:
        assert extract_field_data(tokenize("^FN1^FDHello^FS")) == {1: "Hello"}

    def test_separated_shape(self) -> None:
        zpl = "^FO50,50^FN1^FS^XFR:T.ZPL^FS^FN1^FDHello^FS"
        assert extract_field_data(tokenize(zpl)) == {1: "Hello"}

    def test_shapes_bind_identically(self) -> None:
        inline = extract_field_data(tokenize("^FN3^FDX^FS"))
        separated = extract_field_data(tokenize("^FN3^FS^GB10,10,1^FO1,1^XFA^FN3^FDX^FS"))
        assert inline == separated == {3: "X"}

    def test_separator_keeps_field_pending(self) -> None:
        assert extract_field_data(tokenize("^FN1^FS^FDlate")) == {1: "late"}

    def test_other_command_abandons_field(self) -> None:
        assert extract_field_data(tokenize("^FN1^FO10,10^FDorphan")) == {}

    def test_data_without_field_ignored(self) -> None:
        assert extract_field_data(tokenize("^FO1,1^FDplain^FS")) == {}

    def test_last_write_wins(self) -> None:
        zpl = "^FN1^FDfirst^FS^FN1^FDsecond^FS"
        assert extract_field_data(tokenize(zpl)) == {1: "second"}

    def test_data_binds_once(self) -> None:
        assert extract_field_data(tokenize("^FN1^FDa^FDb")) == {1: "a"}


# =============================================================================
# PASS 2
# =============================================================================


class TestResolveFieldLayouts:
    def test_records_position_and_font(self) -> None:
        layouts = resolve_field_layouts(tokenize("^FO50,60^A0N,40,20^FN1^FS"))
        assert layouts == {1: FieldLayout(50, 60, 40, 20, False)}

    def test_only_template_section(self) -> None:
        zpl = "^FO10,10^FN1^FS^XFA^FS^FO99,99^FN2^FDx^FS"
        assert set(resolve_field_layouts(tokenize(zpl))) == {1}

    def test_first_declaration_wins(self) -> None:
        zpl = "^FO10,10^FN1^FS^FO20,20^FN1^FS"
        assert resolve_field_layouts(tokenize(zpl))[1].x == 10

    def test_reverse_is_one_shot(self) -> None:
        layouts = resolve_field_layouts(tokenize("^FR^FO1,1^FN1^FS^FO2,2^FN2^FS"))
        assert layouts[1].reverse is True
        assert layouts[2].reverse is False

    def test_box_consumes_reverse(self) -> None:
        layouts = resolve_field_layouts(tokenize("^FR^GB50,50,5^FN1^FS"))
        assert layouts[1].reverse is False

    def test_injected_start_state(self) -> None:
        start = DrawingState(x=7, y=8, font_height=12)
        layouts = resolve_field_layouts(tokenize("^FN1"), start)
        assert layouts[1] == FieldLayout(7, 8, 12, start.font_width, False)


# =============================================================================
# PRIMITIVE EMISSION
# =============================================================================


class TestEmitText:
    def test_font_size_rounding(self) -> None:
        assert font_size_for(30) == 18
        assert font_size_for(25) == 15
        assert font_size_for(1) == 1

    def test_baseline_below_origin(self, builder: SvgBuilder, font_file: str) -> None:
        emit_text(builder, "Hi", FieldLayout(50, 50, 30, 30), font_file)
        (text,) = texts(builder)
        assert (text.x, text.y, text.size, text.color) == (50, 68, 18, "black")
        assert text.font_path == font_file

    def test_reverse_paints_background(self, builder: SvgBuilder, font_file: str) -> None:
        emit_text(builder, "ABCD", FieldLayout(10, 20, 30, 30, True), font_file)
        background, text = builder.primitives
        assert isinstance(background, RectPrimitive)
        assert (background.x, background.y) == (10, 20)
        assert background.width == int(4 * 18 * 0.6)
        assert background.height == 30
        assert background.fill == "black"
        assert isinstance(text, TextPrimitive)
        assert text.color == "white"

    def test_empty_text_draws_nothing(self, builder: SvgBuilder) -> None:
        emit_text(builder, "", FieldLayout(0, 0), None)
        assert builder.primitives == ()

    def test_missing_font_raises(self, builder: SvgBuilder, tmp_path: Path) -> None:
        with pytest.raises(FontNotFoundError, match="not found"):
            emit_text(builder, "x", FieldLayout(0, 0), str(tmp_path / "missing.ttf"))

    def test_unresolved_font_raises(self, builder: SvgBuilder) -> None:
        with pytest.raises(FontNotFoundError):
            emit_text(builder, "x", FieldLayout(0, 0), None)


class TestDrawBox:
    def test_filled(self, builder: SvgBuilder) -> None:
        draw_box(builder, 5, 5, GraphicBox(200, 100, 150), reverse=False)
        assert rects(builder) == [RectPrimitive(5, 5, 200, 100, "black", "none", 1)]

    def test_line(self, builder: SvgBuilder) -> None:
        draw_box(builder, 0, 0, GraphicBox(100, 100, 100), reverse=False)
        assert rects(builder) == [RectPrimitive(0, 0, 100, 100, "black", "none", 1)]

    def test_border(self, builder: SvgBuilder) -> None:
        draw_box(builder, 0, 0, GraphicBox(200, 100, 10), reverse=False)
        assert rects(builder) == [RectPrimitive(0, 0, 200, 100, "none", "black", 10)]

    def test_reverse_filled_caps_stroke(self, builder: SvgBuilder) -> None:
        draw_box(builder, 0, 0, GraphicBox(200, 100, 150), reverse=True)
        assert rects(builder) == [RectPrimitive(0, 0, 200, 100, "white", "black", 5)]

    def test_reverse_line(self, builder: SvgBuilder) -> None:
        draw_box(builder, 0, 0, GraphicBox(300, 3, 3), reverse=True)
        assert rects(builder) == [RectPrimitive(0, 0, 300, 3, "white", "none", 1)]

    def test_reverse_border(self, builder: SvgBuilder) -> None:
        draw_box(builder, 0, 0, GraphicBox(200, 100, 10), reverse=True)
        assert rects(builder) == [RectPrimitive(0, 0, 200, 100, "white", "black", 10)]

    def test_logs_box_kind(self, builder: SvgBuilder, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level("DEBUG", logger="src.zpl.passes"):
            draw_box(builder, 7, 9, GraphicBox(200, 100, 10), reverse=True)
        assert "Border 200x100 (thickness 10) at (7, 9) reversed" in caplog.text


# =============================================================================
# PASS 3 / PASS 4
# =============================================================================


class TestRenderCommands:
    def test_box_at_current_origin(self, builder: SvgBuilder) -> None:
        render_commands(tokenize("^FO30,40^GB200,100,10^FS"), {}, builder, None)
        assert rects(builder) == [RectPrimitive(30, 40, 200, 100, "none", "black", 10)]

    def test_reverse_applies_to_one_box(self, builder: SvgBuilder) -> None:
        zpl = "^FO0,0^FR^GB200,100,10^FS^GB200,100,10^FS"
        render_commands(tokenize(zpl), {}, builder, None)
        first, second = rects(builder)
        assert first.fill == "white"
        assert second.fill == "none"

    def test_origin_drops_stale_reverse(self, builder: SvgBuilder) -> None:
        render_commands(tokenize("^FR^FO0,0^GB200,100,10^FS"), {}, builder, None)
        assert rects(builder)[0].fill == "none"

    def test_unassociated_inline_text(self, builder: SvgBuilder, font_file: str) -> None:
        render_commands(tokenize("^FO10,10^A0N,30,30^FDInline^FS"), {}, builder, font_file)
        (text,) = texts(builder)
        assert (text.text, text.x, text.y) == ("Inline", 10, 28)

    def test_inline_reverse_text(self, builder: SvgBuilder, font_file: str) -> None:
        render_commands(tokenize("^FO10,10^FR^FDRev^FS"), {}, builder, font_file)
        background, text = builder.primitives
        assert isinstance(background, RectPrimitive) and background.fill == "black"
        assert isinstance(text, TextPrimitive) and text.color == "white"

    def test_field_text_not_drawn_inline(self, builder: SvgBuilder, font_file: str) -> None:
        commands = tokenize("^FO10,10^FN1^FDField^FS")
        render_commands(commands, extract_field_data(commands), builder, font_file)
        assert texts(builder) == []

    def test_barcode_consumes_field(self, builder: SvgBuilder) -> None:
        commands = tokenize("^FO10,10^BY2^BCN,80,Y^FN2^FDAB^FS")
        consumed = render_commands(commands, {2: "AB"}, builder, None)
        assert consumed == {2}
        assert len(rects(builder)) == 20
        (label,) = texts(builder)
        assert label.text == "AB"
        assert label.y == 10 + 80 + 20

    def test_barcode_without_data_is_consumed_but_not_drawn(self, builder: SvgBuilder) -> None:
        consumed = render_commands(tokenize("^BCN,80^FS^FN5^FS"), {}, builder, None)
        assert consumed == {5}
        assert builder.primitives == ()

    def test_barcode_without_following_field(self, builder: SvgBuilder) -> None:
        consumed = render_commands(tokenize("^BCN,80^FO1,1^FN5"), {5: "X"}, builder, None)
        assert consumed == set()
        assert builder.primitives == ()

    def test_barcode_interpretation_suppressed(self, builder: SvgBuilder) -> None:
        render_commands(tokenize("^BCN,80,N^FN1^FDAB"), {1: "AB"}, builder, None)
        assert texts(builder) == []


class TestRenderFields:
    def test_draws_bound_fields(self, builder: SvgBuilder, font_file: str) -> None:
        layouts = {1: FieldLayout(50, 50, 30, 30)}
        render_fields({1: "Hello"}, layouts, set(), builder, font_file)
        (text,) = texts(builder)
        assert (text.text, text.x, text.y) == ("Hello", 50, 68)

    @pytest.mark.parametrize(
        "field_data,barcode_fields",
        [
            ({1: ""}, set()),
            ({2: "no layout"}, set()),
            ({1: "barcode"}, {1}),
        ],
    )
    def test_skipped_fields(
        self, builder: SvgBuilder, font_file: str, field_data: dict, barcode_fields: set
    ) -> None:
        layouts = {1: FieldLayout(0, 0)}
        render_fields(field_data, layouts, barcode_fields, builder, font_file)
        assert builder.primitives == ()

    def test_reverse_layout(self, builder: SvgBuilder, font_file: str) -> None:
        render_fields({1: "R"}, {1: FieldLayout(0, 0, 30, 30, True)}, set(), builder, font_file)
        assert [type(p) for p in builder.primitives] == [RectPrimitive, TextPrimitive]


class TestLookbackWindow:
    """Inline ^FD is treated as field data only when ^FN is close enough."""

    @staticmethod
    def label(gap: int) -> str:
        return "^FN1" + "^FO1,1" * gap + "^FDx"

    def test_field_number_at_window_edge(self, builder: SvgBuilder, font_file: str) -> None:
        commands = tokenize(self.label(FIELD_LOOKBACK_WINDOW - 1))
        assert has_recent_field_number(commands, FIELD_LOOKBACK_WINDOW)
        render_commands(commands, {}, builder, font_file)
        assert texts(builder) == []

    def test_field_number_just_outside_window(self, builder: SvgBuilder, font_file: str) -> None:
        commands = tokenize(self.label(FIELD_LOOKBACK_WINDOW))
        assert not has_recent_field_number(commands, FIELD_LOOKBACK_WINDOW + 1)
        render_commands(commands, {}, builder, font_file)
        (text,) = texts(builder)
        assert (text.text, text.x) == ("x", 1)
