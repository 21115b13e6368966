"""
════════════════════════════════════════════════════════════════════════════════════════════════════
TESTS - Item Status Classifier & Tracker
════════════════════════════════════════════════════════════════════════════════════════════════════
"""

import itertools

import pandas as pd
import pytest

from warroom.status_engine import (
    ApprovalStatus,
    BOQCategory,
    ItemStatusPolicy,
    StatusLevel,
    build_item_tracker_table,
    classify_item_status,
    filter_items,
    list_areas,
    summarize_item_statuses,
)


ALL_COMBINATIONS = list(itertools.product(
    list(ApprovalStatus), [False, True], [False, True], [False, True],
))


class TestClassifyItemStatus:
    """Ordered decision list for a single item."""

    @pytest.mark.parametrize("approval,purchased,received,installed", ALL_COMBINATIONS)
    def test_total_over_all_combinations(self, item_factory, approval, purchased, received, installed):
        """Each of the 32 flag combinations yields exactly one status."""
        item = item_factory(
            approval_status=approval,
            purchased=purchased,
            received=received,
            installed=installed,
        )
        for policy in ItemStatusPolicy:
            assert classify_item_status(item, policy) in set(StatusLevel)

    @pytest.mark.parametrize("purchased,received,installed", itertools.product([False, True], repeat=3))
    def test_rejected_is_unsafe(self, item_factory, purchased, received, installed):
        item = item_factory(
            boq_included=True,
            approval_status=ApprovalStatus.REJECTED,
            purchased=purchased,
            received=received,
            installed=installed,
        )
        assert classify_item_status(item) == StatusLevel.UNSAFE

    @pytest.mark.parametrize("boq_included", [False, True])
    def test_fully_delivered_is_safe(self, item_factory, boq_included):
        item = item_factory(
            boq_included=boq_included,
            approval_status=ApprovalStatus.APPROVED,
            purchased=True,
            received=True,
            installed=True,
        )
        assert classify_item_status(item) == StatusLevel.SAFE

    def test_received_not_installed_is_at_risk(self, item_factory):
        item = item_factory(
            boq_included=True,
            approval_status=ApprovalStatus.APPROVED,
            purchased=True,
            received=True,
            installed=False,
        )
        assert classify_item_status(item) == StatusLevel.AT_RISK

    @pytest.mark.parametrize("approval", [ApprovalStatus.PENDING, ApprovalStatus.REVISION])
    def test_awaiting_approval_wins_over_lifecycle(self, item_factory, approval):
        """Pending/revision comes before the lifecycle rules."""
        item = item_factory(
            boq_included=True,
            approval_status=approval,
            purchased=True,
            received=True,
            installed=True,
        )
        assert classify_item_status(item) == StatusLevel.AT_RISK

    def test_approved_not_purchased_is_at_risk(self, item_factory):
        item = item_factory(
            approval_status=ApprovalStatus.APPROVED,
            purchased=False,
            received=True,
            installed=True,
        )
        assert classify_item_status(item) == StatusLevel.AT_RISK

    def test_purchased_not_received_is_at_risk(self, item_factory):
        item = item_factory(
            approval_status=ApprovalStatus.APPROVED,
            purchased=True,
            received=False,
            installed=True,
        )
        assert classify_item_status(item) == StatusLevel.AT_RISK

    @pytest.mark.parametrize("approval,purchased,received,installed", ALL_COMBINATIONS)
    def test_safe_only_when_whole_lifecycle_done(self, item_factory, approval, purchased, received, installed):
        item = item_factory(
            approval_status=approval,
            purchased=purchased,
            received=received,
            installed=installed,
        )
        expected_safe = (
            approval == ApprovalStatus.APPROVED and purchased and received and installed
        )
        assert (classify_item_status(item) == StatusLevel.SAFE) == expected_safe


class TestItemStatusPolicy:
    """APPROVAL_GATED vs BOQ_STRICT gating."""

    def test_default_policy_ignores_boq_flag(self, item_factory):
        item = item_factory(boq_included=False, approval_status=ApprovalStatus.PENDING)
        assert classify_item_status(item) == StatusLevel.AT_RISK
        assert classify_item_status(item, ItemStatusPolicy.APPROVAL_GATED) == StatusLevel.AT_RISK

    def test_boq_strict_blocks_items_outside_boq(self, item_factory):
        item = item_factory(
            boq_included=False,
            approval_status=ApprovalStatus.APPROVED,
            purchased=True,
            received=True,
            installed=True,
        )
        assert classify_item_status(item, ItemStatusPolicy.BOQ_STRICT) == StatusLevel.UNSAFE

    def test_boq_strict_same_as_default_for_boq_items(self, item_factory):
        for approval, purchased, received, installed in ALL_COMBINATIONS:
            item = item_factory(
                boq_included=True,
                approval_status=approval,
                purchased=purchased,
                received=received,
                installed=installed,
            )
            assert (
                classify_item_status(item, ItemStatusPolicy.BOQ_STRICT)
                == classify_item_status(item, ItemStatusPolicy.APPROVAL_GATED)
            )


class TestItemTracker:
    """Status counts, filters and the tracker table."""

    def test_summarize_counts(self, sample_items):
        counts = summarize_item_statuses(sample_items)
        assert counts == {"safe": 1, "at-risk": 2, "unsafe": 1}

    def test_summarize_empty_has_all_keys(self):
        assert summarize_item_statuses([]) == {"safe": 0, "at-risk": 0, "unsafe": 0}

    def test_summarize_boq_strict(self, sample_items):
        counts = summarize_item_statuses(sample_items, ItemStatusPolicy.BOQ_STRICT)
        assert counts["unsafe"] == 1
        assert sum(counts.values()) == len(sample_items)

    def test_filter_by_category(self, sample_items):
        result = filter_items(sample_items, category=BOQCategory.LIGHTING)
        assert [i.id for i in result] == ["item-2", "item-3"]

    def test_filter_by_status(self, sample_items):
        result = filter_items(sample_items, status=StatusLevel.UNSAFE)
        assert [i.id for i in result] == ["item-4"]

    def test_filter_combined(self, sample_items):
        result = filter_items(
            sample_items,
            category=BOQCategory.LIGHTING,
            status=StatusLevel.AT_RISK,
            area="Living Room",
        )
        assert len(result) == 2

    def test_filter_none_keeps_all(self, sample_items):
        assert filter_items(sample_items) == sample_items

    def test_list_areas_sorted_unique(self, sample_items, item_factory):
        items = sample_items + [item_factory("item-5", area="")]
        assert list_areas(items) == ["Kitchen", "Living Room"]

    def test_tracker_table(self, sample_items):
        df = build_item_tracker_table(sample_items)

        assert isinstance(df, pd.DataFrame)
        assert len(df) == 4
        assert list(df["Status"]) == ["Safe", "At Risk", "At Risk", "Unsafe"]
        assert df.loc[1, "Category"] == "Lighting"
        assert df.loc[1, "Delivery"] == "-"

    def test_tracker_table_empty(self):
        df = build_item_tracker_table([])
        assert df.empty
        assert "Status" in df.columns
