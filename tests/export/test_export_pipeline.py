"""
Unit Tests for the Export Pipeline

Tests for the export guards, state machine, notices and the full
compose -> rasterize -> write -> confirm run.
"""

from datetime import datetime, timezone
from unittest.mock import MagicMock

import fitz
import pytest
from PIL import Image

from studybrick_toolkit.core.models import PaperMetadata, SelectionEntry
from studybrick_toolkit.drafts import NoticeLevel
from studybrick_toolkit.export import (
    A4_WIDTH_PT,
    ExportPipeline,
    ExportRateLimiter,
    ExportState,
    SaveError,
)
from studybrick_toolkit.paper import PaginationMode, RasterizeError

METADATA = PaperMetadata("Acme Academy", "Unit 3")


@pytest.fixture
def entries(make_question):
    return [SelectionEntry(make_question(qid)) for qid in ("a", "b")]


@pytest.fixture
def rasterizer():
    return MagicMock(side_effect=lambda layout, scale: Image.new("RGB", (layout.width, 50), "white"))


@pytest.fixture
def writer():
    return MagicMock(side_effect=lambda images, path: len(images))


@pytest.fixture
def pipeline(notifier, rasterizer, writer):
    return ExportPipeline(notifier, rasterizer=rasterizer, writer=writer, confirm=MagicMock())


def _states(pipeline):
    seen = []
    pipeline.add_state_listener(seen.append)
    return seen


class TestGuards:
    """Tests for refusals before any drawing happens."""

    def test_when_selection_empty_then_rasterizer_never_called(self, pipeline, rasterizer, notifier, tmp_path):
        result = pipeline.export([], METADATA, ["physics"], tmp_path)

        assert not result.success
        rasterizer.assert_not_called()
        notice = notifier.drain()[-1]
        assert notice.level is NoticeLevel.ERROR
        assert notice.message == "Add questions before exporting"
        assert pipeline.state is ExportState.IDLE

    def test_when_rate_limited_then_refused_with_notice(self, notifier, rasterizer, writer, entries, tmp_path):
        limiter = ExportRateLimiter(tmp_path / "history.json", max_per_hour=1)
        limiter.record(datetime.now(timezone.utc))
        pipeline = ExportPipeline(
            notifier, rate_limiter=limiter, rasterizer=rasterizer, writer=writer, confirm=MagicMock(),
        )

        result = pipeline.export(entries, METADATA, ["physics"], tmp_path)

        assert not result.success
        rasterizer.assert_not_called()
        notice = notifier.drain()[-1]
        assert notice.message == "Export limit reached. Please try again later."
        assert notice.description == "Maximum 1 exports per hour allowed."

    def test_when_export_in_flight_then_second_refused(self, pipeline, notifier, entries, tmp_path):
        """Only one export runs at a time."""
        nested = []

        def reenter(state):
            if state is ExportState.EXPORTING and not nested:
                nested.append(pipeline.export(entries, METADATA, [], tmp_path))

        pipeline.add_state_listener(reenter)

        result = pipeline.export(entries, METADATA, [], tmp_path)

        assert result.success
        assert not nested[0].success
        assert nested[0].error == "An export is already in progress"

    def test_when_running_then_trigger_disabled(self, notifier, writer, entries, tmp_path):
        flags = []

        def observe(layout, scale):
            flags.append(pipeline.can_export)
            return Image.new("RGB", (layout.width, 10), "white")

        pipeline = ExportPipeline(notifier, rasterizer=observe, writer=writer, confirm=MagicMock())

        pipeline.export(entries, METADATA, [], tmp_path)

        assert flags == [False]
        assert pipeline.can_export


class TestStateMachine:
    """Tests that every path returns to IDLE."""

    def test_when_success_then_exporting_succeeded_idle(self, pipeline, notifier, entries, tmp_path):
        states = _states(pipeline)

        result = pipeline.export(entries, METADATA, ["physics"], tmp_path)

        assert states == [ExportState.EXPORTING, ExportState.SUCCEEDED, ExportState.IDLE]
        assert result.success
        assert result.output_path == tmp_path / "studybrick-paper.pdf"
        assert result.question_count == 2
        assert [(n.level, n.message) for n in notifier.drain()] == [
            (NoticeLevel.INFO, "Generating PDF..."),
            (NoticeLevel.SUCCESS, "PDF saved successfully!"),
        ]

    def test_when_rasterize_fails_then_failed_idle_and_nothing_written(self, notifier, writer, entries, tmp_path):
        rasterizer = MagicMock(side_effect=RasterizeError("out of memory"))
        pipeline = ExportPipeline(notifier, rasterizer=rasterizer, writer=writer, confirm=MagicMock())
        states = _states(pipeline)

        result = pipeline.export(entries, METADATA, [], tmp_path)

        assert states == [ExportState.EXPORTING, ExportState.FAILED, ExportState.IDLE]
        assert not result.success
        writer.assert_not_called()
        notice = notifier.drain()[-1]
        assert notice.message == "Failed to export PDF. Please try again."
        assert "out of memory" in notice.description

    def test_when_save_unconfirmed_then_failed_and_not_recorded(self, notifier, rasterizer, writer, entries, tmp_path):
        limiter = ExportRateLimiter(tmp_path / "history.json", max_per_hour=5)
        confirm = MagicMock(side_effect=SaveError("Saved PDF has 0 pages, expected 1"))
        pipeline = ExportPipeline(
            notifier, rate_limiter=limiter, rasterizer=rasterizer, writer=writer, confirm=confirm,
        )

        result = pipeline.export(entries, METADATA, [], tmp_path)

        assert not result.success
        assert limiter.remaining() == 5
        assert pipeline.state is ExportState.IDLE

    def test_when_history_unwritable_then_export_still_succeeds(
        self, notifier, rasterizer, writer, entries, tmp_path, caplog
    ):
        """A saved, confirmed PDF is reported as saved even if the history write fails."""
        limiter = MagicMock(spec=ExportRateLimiter)
        limiter.can_export.return_value = True
        limiter.record.side_effect = PermissionError("read-only data dir")
        pipeline = ExportPipeline(
            notifier, rate_limiter=limiter, rasterizer=rasterizer, writer=writer, confirm=MagicMock(),
        )

        result = pipeline.export(entries, METADATA, [], tmp_path)

        assert result.success
        assert notifier.drain()[-1].message == "PDF saved successfully!"
        assert "Could not record export" in caplog.text
        assert pipeline.state is ExportState.IDLE

    def test_when_unexpected_error_then_still_idle(self, notifier, rasterizer, entries, tmp_path):
        writer = MagicMock(side_effect=KeyError("boom"))
        pipeline = ExportPipeline(notifier, rasterizer=rasterizer, writer=writer, confirm=MagicMock())

        result = pipeline.export(entries, METADATA, [], tmp_path)

        assert not result.success
        assert pipeline.state is ExportState.IDLE


class TestRendering:
    """Tests for what is handed to the drawing and writing steps."""

    def test_when_exported_then_layout_uses_display_subjects(self, pipeline, rasterizer, entries, tmp_path):
        pipeline.export(entries, METADATA, ["physics", "maths"], tmp_path)

        layout = rasterizer.call_args.args[0]
        header_texts = [run.text for run in layout.blocks[0].runs]
        assert " PHYSICS, MATHS" in header_texts
        assert " 6 Mins" in header_texts
        assert layout.question_ids == ("a", "b")

    def test_when_success_then_export_recorded(self, notifier, rasterizer, writer, entries, tmp_path):
        limiter = ExportRateLimiter(tmp_path / "history.json", max_per_hour=5)
        pipeline = ExportPipeline(
            notifier, rate_limiter=limiter, rasterizer=rasterizer, writer=writer, confirm=MagicMock(),
        )

        pipeline.export(entries, METADATA, [], tmp_path)

        assert limiter.remaining() == 4

    def test_when_paged_then_one_image_per_segment(self, notifier, writer, make_question, tmp_path):
        segment_rasterizer = MagicMock(
            side_effect=lambda layout, segments, scale: [Image.new("RGB", (10, 10)) for _ in segments]
        )
        pipeline = ExportPipeline(
            notifier,
            pagination=PaginationMode.PAGED,
            segment_rasterizer=segment_rasterizer,
            writer=writer,
            confirm=MagicMock(),
        )
        entries = [SelectionEntry(make_question(f"q{i}")) for i in range(25)]

        result = pipeline.export(entries, METADATA, [], tmp_path)

        segments = segment_rasterizer.call_args.args[1]
        assert len(segments) > 1
        assert result.page_count == len(segments)

    def test_when_exported_for_real_then_single_full_bleed_page(self, notifier, entries, tmp_path):
        """Default mode writes one page as tall as the paper, A4 wide."""
        pipeline = ExportPipeline(notifier)

        result = pipeline.export(entries, METADATA, ["physics"], tmp_path)

        assert result.success
        with fitz.open(str(result.output_path)) as doc:
            assert doc.page_count == 1
            assert doc[0].rect.width == pytest.approx(A4_WIDTH_PT, abs=0.5)
            assert doc[0].rect.height >= doc[0].rect.width
