"""
Unit tests for the layout engine

Covers partitioning, premium ordering, placement guards and
primary/xol pairing.
"""
import pytest
from mudmap.config import PlotConfig
from mudmap.layout import Layer, LayoutEngine, compute_groups, render_layers, find_matching_xol


def _layer(id, layer_type='primary', limit='', share='', premium='', attachment='', color='#336699'):
    return Layer(id=id, layer_type=layer_type, limit=limit, share=share,
                 premium=premium, attachment=attachment, color=color, insurer=f"I{id}")


@pytest.mark.unit
class TestComputeGroups:
    """Tests for compute_groups"""

    def test_empty(self):
        """Empty input gives three empty groups and zero width"""
        groups = compute_groups([])
        assert groups.quota_share_layers == ()
        assert groups.primary_layers == ()
        assert groups.xol_layers == ()
        assert groups.quota_share_width == 0

    def test_partition_by_type(self, mixed_tower):
        layers, _ = mixed_tower
        groups = compute_groups(layers)
        assert [l.id for l in groups.quota_share_layers] == [11, 10]
        assert [l.id for l in groups.primary_layers] == [21, 20]
        assert [l.id for l in groups.xol_layers] == [31, 30]

    def test_quota_share_width(self, mixed_tower):
        layers, _ = mixed_tower
        assert compute_groups(layers).quota_share_width == 40.0

    def test_non_numeric_premium_sorts_as_zero(self):
        layers = [_layer(1, premium='50'), _layer(2, premium='abc'), _layer(3, premium='')]
        groups = compute_groups(layers)
        assert [l.id for l in groups.primary_layers] == [2, 3, 1]

    def test_stable_for_equal_premium(self):
        """Ties keep their input order"""
        layers = [_layer(5, premium='10'), _layer(3, premium='10'), _layer(4, premium='10')]
        assert [l.id for l in compute_groups(layers).primary_layers] == [5, 3, 4]

    def test_comma_formatted_premium(self):
        layers = [_layer(1, premium='2,000'), _layer(2, premium='300')]
        assert [l.id for l in compute_groups(layers).primary_layers] == [2, 1]

    def test_non_numeric_share_ignored_in_width(self):
        layers = [_layer(1, 'quotashare', share='30'), _layer(2, 'quotashare', share='abc')]
        assert compute_groups(layers).quota_share_width == 30.0

    def test_unknown_type_ignored(self):
        groups = compute_groups([_layer(1, layer_type='surplus', share='10')])
        assert groups.n_layers == 0

    def test_input_not_mutated(self, mixed_tower):
        layers, _ = mixed_tower
        before = list(layers)
        compute_groups(layers)
        assert layers == before


@pytest.mark.unit
class TestRenderLayers:
    """Tests for render_layers"""

    def test_primary_with_paired_xol(self, paired_tower):
        """Primary 1M/50% with 2M xol on top, total 3M"""
        layers, total = paired_tower
        elements = render_layers(layers, total)

        assert [e.key for e in elements] == ['p-1', 'x-2']
        primary, xol = elements

        assert primary.left == 0
        assert primary.bottom == 0
        assert primary.height == pytest.approx(33.33, abs=0.01)
        assert primary.width == 50
        assert primary.z_index is None

        assert xol.left == 0
        assert xol.bottom == pytest.approx(33.33, abs=0.01)
        assert xol.height == pytest.approx(66.67, abs=0.01)
        assert xol.width == 50
        assert xol.z_index == 2

    def test_full_quota_share(self):
        layers = [_layer(1, 'quotashare', limit='500000', share='100')]
        elements = render_layers(layers, 500000)
        assert len(elements) == 1
        e = elements[0]
        assert (e.left, e.bottom, e.height, e.width) == (0, 0, 100, 100)
        assert e.key == 'qs-1'

    def test_empty(self):
        assert render_layers([], 1000) == []

    def test_non_numeric_share_skipped_without_advancing(self):
        layers = [
            _layer(1, 'quotashare', limit='100', share='abc', premium='1'),
            _layer(2, 'quotashare', limit='100', share='30', premium='2'),
        ]
        elements = render_layers(layers, 100)
        assert [e.key for e in elements] == ['qs-2']
        assert elements[0].left == 0

    @pytest.mark.parametrize("limit,share", [('0', '10'), ('100', '0'), ('-5', '10'), ('100', '-10'), ('', '')])
    def test_non_positive_values_skipped(self, limit, share):
        layers = [
            _layer(1, 'primary', limit=limit, share=share, premium='1'),
            _layer(2, 'primary', limit='100', share='25', premium='2'),
        ]
        elements = render_layers(layers, 1000)
        assert [e.key for e in elements] == ['p-2']
        assert elements[0].left == 0

    @pytest.mark.parametrize("total", [0, '0', '', None, 'abc', -100])
    def test_no_total_limit_places_nothing(self, paired_tower, total):
        layers, _ = paired_tower
        assert render_layers(layers, total) == []

    def test_comma_formatted_total_limit(self, paired_tower):
        layers, _ = paired_tower
        assert render_layers(layers, '3,000,000') == render_layers(layers, 3000000)

    def test_mixed_tower_placement(self, mixed_tower):
        layers, total = mixed_tower
        elements = render_layers(layers, total)

        assert [e.key for e in elements] == ['qs-11', 'qs-10', 'p-21', 'p-20', 'x-30']
        geometry = {e.key: (e.left, e.bottom, e.width, e.height) for e in elements}
        assert geometry['qs-11'] == pytest.approx((0, 0, 15, 50))
        assert geometry['qs-10'] == pytest.approx((15, 0, 25, 50))
        assert geometry['p-21'] == pytest.approx((40, 0, 40, 10))
        assert geometry['p-20'] == pytest.approx((80, 0, 20, 20))
        assert geometry['x-30'] == pytest.approx((80, 20, 20, 30))

    def test_position_advance_equals_placed_floor_shares(self, mixed_tower):
        layers, total = mixed_tower
        elements = render_layers(layers, total)
        floor = [e for e in elements if e.type != 'xol']
        last = floor[-1]
        assert last.left + last.width == sum(e.width for e in floor)

    def test_unmatched_xol_not_drawn(self, mixed_tower):
        layers, total = mixed_tower
        keys = [e.key for e in render_layers(layers, total)]
        assert 'x-31' not in keys

    def test_first_matching_xol_by_premium_wins(self):
        layers = [
            _layer(1, 'primary', limit='100', share='50', premium='1'),
            _layer(2, 'xol', limit='100', share='50', attachment='100', premium='20'),
            _layer(3, 'xol', limit='100', share='50', attachment='100', premium='10'),
        ]
        keys = [e.key for e in render_layers(layers, 200)]
        assert keys == ['p-1', 'x-3']

    def test_first_match_failing_guard_has_no_fallback(self):
        """Only the first match is considered, even if it cannot be drawn"""
        layers = [
            _layer(1, 'primary', limit='100', share='50', premium='1'),
            _layer(2, 'xol', limit='0', share='50', attachment='100', premium='1'),
            _layer(3, 'xol', limit='100', share='50', attachment='100', premium='2'),
        ]
        keys = [e.key for e in render_layers(layers, 200)]
        assert keys == ['p-1']

    def test_xol_follows_its_primary(self):
        layers = [
            _layer(1, 'primary', limit='100', share='30', premium='1'),
            _layer(2, 'primary', limit='200', share='30', premium='2'),
            _layer(3, 'xol', limit='50', share='30', attachment='200', premium='1'),
            _layer(4, 'xol', limit='50', share='30', attachment='100', premium='2'),
        ]
        elements = render_layers(layers, 400)
        assert [e.key for e in elements] == ['p-1', 'x-4', 'p-2', 'x-3']
        assert elements[1].left == elements[0].left
        assert elements[3].left == elements[2].left == 30

    def test_xol_does_not_advance_position(self):
        layers = [
            _layer(1, 'primary', limit='100', share='20', premium='1'),
            _layer(2, 'xol', limit='100', share='60', attachment='100', premium='1'),
            _layer(3, 'primary', limit='50', share='10', premium='2'),
        ]
        elements = render_layers(layers, 200)
        assert elements[-1].key == 'p-3'
        assert elements[-1].left == 20

    def test_skipped_primary_hides_xol(self):
        """An xol is only drawn right after a placed primary"""
        layers = [
            _layer(1, 'primary', limit='100', share='0', premium='1'),
            _layer(2, 'xol', limit='100', share='50', attachment='100', premium='1'),
        ]
        assert render_layers(layers, 200) == []

    def test_two_primaries_same_limit_share_xol(self):
        """The same xol is stacked on every primary whose limit it attaches to"""
        layers = [
            _layer(1, 'primary', limit='100', share='30', premium='1'),
            _layer(2, 'primary', limit='100', share='20', premium='2'),
            _layer(3, 'xol', limit='50', share='10', attachment='100', premium='1'),
        ]
        elements = render_layers(layers, 200)
        assert [e.key for e in elements] == ['p-1', 'x-3', 'p-2', 'x-3']
        assert [e.left for e in elements] == [0, 0, 30, 30]

    def test_exact_attachment_match_only(self):
        layers = [
            _layer(1, 'primary', limit='100', share='50', premium='1'),
            _layer(2, 'xol', limit='100', share='50', attachment='100.0001', premium='1'),
        ]
        assert [e.key for e in render_layers(layers, 200)] == ['p-1']

    def test_comma_formatted_attachment_matches(self):
        layers = [
            _layer(1, 'primary', limit='1000000', share='50', premium='1'),
            _layer(2, 'xol', limit='1,000,000', share='50', attachment='1,000,000', premium='1'),
        ]
        assert [e.key for e in render_layers(layers, '2,000,000')] == ['p-1', 'x-2']

    def test_label_fields(self, paired_tower):
        layers, total = paired_tower
        primary, xol = render_layers(layers, total)
        assert primary.insurer == 'Alpha'
        assert primary.premium == 100
        assert primary.share == 50
        assert primary.limit == 1000000
        assert xol.border_color == 'hsl(120, 70%, 50%)'

    def test_fill_color_has_alpha(self, paired_tower):
        layers, total = paired_tower
        primary, xol = render_layers(layers, total)
        assert primary.color == '#1f77b4b3'
        assert xol.color.endswith('b3')
        assert render_layers(layers, total, fill_alpha=1.0)[0].color == '#1f77b4ff'

    def test_default_fill_alpha_follows_plot_config(self, paired_tower):
        layers, total = paired_tower
        assert render_layers(layers, total) == render_layers(layers, total, fill_alpha=PlotConfig().fill_alpha)

    def test_deterministic(self, mixed_tower):
        layers, total = mixed_tower
        assert render_layers(layers, total) == render_layers(layers, total)
        assert render_layers(list(layers), total) == render_layers(tuple(layers), total)

    def test_style_strings(self, paired_tower):
        layers, total = paired_tower
        xol = render_layers(layers, total)[1]
        style = xol.style()
        assert style['width'] == '50.0%'
        assert style['zIndex'] == '2'
        assert style['borderColor'] == 'hsl(120, 70%, 50%)'


@pytest.mark.unit
class TestFindMatchingXol:
    """Tests for find_matching_xol"""

    def test_returns_first(self):
        xols = [_layer(1, 'xol', attachment='5'), _layer(2, 'xol', attachment='5')]
        assert find_matching_xol(5.0, xols).id == 1

    def test_none_when_no_match(self):
        assert find_matching_xol(5.0, [_layer(1, 'xol', attachment='6')]) is None


@pytest.mark.unit
class TestLayoutEngine:
    """Tests for LayoutEngine.calculate_layout"""

    def test_stats(self, mixed_tower):
        layers, total = mixed_tower
        layout = LayoutEngine().calculate_layout(layers, total)

        assert layout.n_elements == 5
        assert layout.total_limit == 10000000
        assert layout.total_share == 130
        assert layout.share_exceeded
        assert [l.id for l in layout.unmatched_xol_layers] == [31]
        assert layout.layout_stats['unmatched_xol_ids'] == [31]
        assert layout.layout_stats['skipped_layer_ids'] == []
        assert layout.layout_stats['final_position'] == 100
        assert layout.placed_layer_ids == [11, 10, 21, 20, 30]

    def test_skipped_layers_reported(self):
        layers = [_layer(1, 'primary', limit='100', share=''), _layer(2, 'quotashare', limit='', share='10')]
        layout = LayoutEngine().calculate_layout(layers, 100)
        assert layout.n_elements == 0
        assert sorted(layout.layout_stats['skipped_layer_ids']) == [1, 2]
        assert not layout.share_exceeded

    def test_elements_match_render_layers(self, mixed_tower):
        layers, total = mixed_tower
        assert LayoutEngine().calculate_layout(layers, total).elements == render_layers(layers, total)

    def test_elements_by_type(self, mixed_tower):
        layers, total = mixed_tower
        layout = LayoutEngine().calculate_layout(layers, total)
        assert [e.key for e in layout.get_elements_by_type('quotashare')] == ['qs-11', 'qs-10']

    def test_shared_xol_is_not_reported_unmatched(self):
        layers = [
            _layer(1, 'primary', limit='100', share='30', premium='1'),
            _layer(2, 'primary', limit='100', share='20', premium='2'),
            _layer(3, 'xol', limit='50', share='10', attachment='100', premium='1'),
        ]
        layout = LayoutEngine().calculate_layout(layers, 200)
        assert layout.placed_layer_ids == [1, 3, 2, 3]
        assert layout.layout_stats['unmatched_xol_ids'] == []
        assert layout.layout_stats['blocked_xol_ids'] == []

    def test_blocked_xol_reported_apart_from_unmatched(self):
        layers = [
            _layer(1, 'primary', limit='100', share='50', premium='1'),
            _layer(2, 'xol', limit='0', share='50', attachment='100', premium='1'),
            _layer(3, 'xol', limit='100', share='50', attachment='100', premium='2'),
            _layer(4, 'xol', limit='100', share='50', attachment='999', premium='3'),
        ]
        layout = LayoutEngine().calculate_layout(layers, 200)
        assert layout.layout_stats['blocked_xol_ids'] == [2, 3]
        assert layout.layout_stats['unmatched_xol_ids'] == [4]
        assert [l.id for l in layout.undrawn_xol_layers] == [2, 3, 4]
