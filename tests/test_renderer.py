"""PillowRenderer tests.

Font metrics depend on which fonts the machine has, so these tests assert
layout properties rather than exact pixel counts.
"""
from __future__ import annotations

import pytest
from PIL import Image, ImageDraw

from textpager.measurer import CapacityMeasurer
from textpager.paginator import Paginator, render_content_for
from textpager.pipeline import compute_fill_ratio
from textpager.renderer import MeasurementUnavailable, PillowRenderer
from textpager.tokens import split_tokens
from textpager.types import Style
from textpager.validator import check_pages

SAMPLE = (
    "It was the best of times, it was the worst of times, it was the age of wisdom,\n"
    "it was the age of foolishness, it was the epoch of belief, it was the epoch of\n"
    "incredulity, it was the season of Light, it was the season of Darkness, it was\n"
    "the spring of hope, it was the winter of despair.\n\n"
) * 6


@pytest.fixture
def renderer() -> PillowRenderer:
    return PillowRenderer(width=240, height=120, style=Style(name="medium", font_size=16))


class TestMetrics:
    def test_reference_unit_box_is_positive(self, renderer):
        box = renderer.measure_reference_unit_box()
        assert box.width > 0
        assert box.height > 0

    def test_line_height_follows_spacing(self):
        tight = PillowRenderer(width=200, height=100, style=Style(name="a", font_size=16, line_spacing=1.0))
        loose = PillowRenderer(width=200, height=100, style=Style(name="b", font_size=16, line_spacing=2.0))
        assert loose.line_height() == pytest.approx(2 * tight.line_height())

    def test_empty_reference_unit_is_unavailable(self):
        r = PillowRenderer(width=200, height=100, style=Style(name="m", font_size=16), reference_unit="")
        with pytest.raises(MeasurementUnavailable):
            r.measure_reference_unit_box()

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            PillowRenderer(width=0, height=100, style=Style(name="m", font_size=16))
        with pytest.raises(ValueError):
            PillowRenderer(width=100, height=100, style=Style(name="m", font_size=0))


class TestLayout:
    def test_lines_stay_within_width(self, renderer):
        lines = renderer.layout_lines(split_tokens(" ".join(SAMPLE.split())))
        assert len(lines) > 1
        for words in lines:
            if len(words) > 1:
                assert renderer._text_width(" ".join(words)) <= renderer.width

    def test_overlong_word_gets_own_line(self, renderer):
        long_word = "x" * 200
        lines = renderer.layout_lines(["a", " ", long_word, " ", "b"])
        assert lines == [["a"], [long_word], ["b"]]

    def test_trailing_space_takes_no_room(self, renderer):
        renderer.project_tokens(["hello", " "])
        with_space = renderer.projected_box()
        renderer.project_tokens(["hello"])
        assert renderer.projected_box() == with_space

    def test_projection_clears(self, renderer):
        renderer.project_tokens(["hello", " ", "world"])
        assert renderer.projected_box().height > 0
        renderer.clear_projection()
        assert renderer.projected_box().height == 0

    def test_marks_follow_each_prefix(self, renderer):
        tokens = split_tokens(" ".join(SAMPLE.split()))[:80]
        marks: list[tuple[int, float]] = []
        renderer.layout_lines(tokens, marks)

        assert len(marks) == len(tokens)
        for k in (1, 2, 17, 40, 80):
            assert marks[k - 1][0] == len(renderer.layout_lines(tokens[:k]))

    def test_render_page_size(self):
        r = PillowRenderer(width=200, height=100, style=Style(name="m", font_size=16), margin=10)
        img = r.render_page(["hello", " ", "world"])
        assert isinstance(img, Image.Image)
        assert img.size == (220, 120)
        assert compute_fill_ratio(img, margin=10) > 0


class TestPaginationWithPillow:
    def test_pages_partition_and_fit(self, renderer):
        paginator = Paginator(CapacityMeasurer(renderer))

        pages = paginator.paginate(SAMPLE)

        assert len(pages) > 1
        assert check_pages(SAMPLE, pages) == []
        for i in range(len(pages)):
            renderer.project_tokens(render_content_for(pages, i, SAMPLE))
            assert renderer.projected_box().height <= renderer.height
        renderer.clear_projection()

    def test_larger_font_needs_more_pages(self, renderer):
        paginator = Paginator(CapacityMeasurer(renderer))
        small = len(paginator.paginate(SAMPLE))

        renderer.set_style(Style(name="large", font_size=28))
        large = len(paginator.paginate(SAMPLE))

        assert large > small


class TestFillRatio:
    def test_blank_page(self):
        assert compute_fill_ratio(Image.new("RGB", (50, 100), color="white")) == 0.0

    def test_half_filled_page(self):
        img = Image.new("RGB", (50, 100), color="white")
        ImageDraw.Draw(img).rectangle([0, 10, 49, 49], fill="black")
        assert compute_fill_ratio(img) == pytest.approx(0.5)

    def test_margin_is_excluded(self):
        img = Image.new("RGB", (60, 120), color="white")
        ImageDraw.Draw(img).rectangle([10, 10, 49, 59], fill="black")
        # content area is rows 10..109; ink ends at row 59
        assert compute_fill_ratio(img, margin=10) == pytest.approx(0.5)


class TestProjectionReuse:
    def test_trimming_lays_out_once(self, renderer, monkeypatch):
        tokens = split_tokens(" ".join(SAMPLE.split()))
        layout = renderer.layout_lines
        calls = []

        def counting(*args, **kwargs):
            calls.append(len(args[0]))
            return layout(*args, **kwargs)

        monkeypatch.setattr(renderer, "layout_lines", counting)
        count = CapacityMeasurer(renderer).fit_count(tokens)

        assert len(calls) == 1
        monkeypatch.undo()
        # the kept prefix fits and one more token would not
        assert len(renderer.layout_lines(tokens[:count])) * renderer.line_height() <= renderer.height
        assert len(renderer.layout_lines(tokens[: count + 1])) * renderer.line_height() > renderer.height

    def test_shorter_prefix_reuses_layout(self, renderer):
        tokens = ["hello", " ", "world", " ", "again"]
        renderer.project_tokens(tokens)
        full = renderer.projected_box()
        renderer.project_tokens(tokens[:1])
        one = renderer.projected_box()

        assert one.width == pytest.approx(renderer._text_width("hello"))
        assert full.width >= one.width

    def test_different_tokens_are_laid_out_again(self, renderer):
        renderer.project_tokens(["x" * 200, " ", "b"])
        tall = renderer.projected_box()
        renderer.project_tokens(["a"])

        assert renderer.projected_box().height < tall.height

    def test_restyle_drops_projection(self, renderer):
        renderer.project_tokens(["hello"])
        renderer.set_style(Style(name="large", font_size=28))
        assert renderer.projected_box().height == 0
