"""
Unit tests for layer file readers
"""
import pytest
from mudmap.colors import PaletteColorPolicy
from mudmap.io import LayerReader, read_intermediate, read_layers, normalize_layer_type, write_intermediate
from mudmap.layout import Layer


@pytest.mark.unit
class TestNormalizeLayerType:

    @pytest.mark.parametrize("label,expected", [
        ('quotashare', 'quotashare'),
        ('Quota Share', 'quotashare'),
        ('quota-share', 'quotashare'),
        ('Primary', 'primary'),
        ('XoL', 'xol'),
        ('Excess of Loss', 'xol'),
    ])
    def test_aliases(self, label, expected):
        assert normalize_layer_type(label) == expected

    def test_unknown(self):
        with pytest.raises(ValueError):
            normalize_layer_type('surplus')


@pytest.mark.unit
class TestIntermediateFormat:

    def test_round_trip_keeps_raw_values(self, tmp_path):
        layers = [
            Layer(id=1, layer_type='primary', limit='1000000', attachment='0', premium='',
                  share='50', color='#1f77b4', insurer='Alpha'),
            Layer(id=2, layer_type='xol', limit='2000000', attachment='1000000', premium='50',
                  share='abc', color='hsl(120.5, 70%, 50%)', insurer=''),
        ]
        path = tmp_path / "layers.tsv"
        write_intermediate(layers, path, '3,000,000')

        loaded, total_limit = read_intermediate(path)
        assert total_limit == '3000000'
        assert loaded == layers

    def test_metadata_line(self, tower_tsv):
        first_line = tower_tsv.read_text(encoding='utf-8').splitlines()[0]
        assert first_line == '# total_limit=10000000'

    def test_missing_metadata(self, tmp_path):
        path = tmp_path / "plain.tsv"
        path.write_text("id\tlayer_type\n1\tprimary\n", encoding='utf-8')
        with pytest.raises(ValueError):
            read_intermediate(path)


@pytest.mark.unit
class TestLayerReader:

    def test_reads_intermediate_file(self, tower_tsv, mixed_tower):
        layers, total_limit = read_layers(tower_tsv)
        assert total_limit == '10000000'
        assert [l.id for l in layers] == [l.id for l in mixed_tower[0]]

    def test_total_limit_override(self, tower_tsv):
        _, total_limit = read_layers(tower_tsv, total_limit='5000000')
        assert total_limit == '5000000'

    def test_csv_with_export_titles(self, tmp_path):
        path = tmp_path / "layers.csv"
        path.write_text(
            "Layer Type,Insurer,Limit (USD),Attachment (USD),Premium (USD),Share (%),Color\n"
            "Primary,Alpha,1000000,0,100,50,\n"
            ",,,,,,\n"
            "XoL,Beta,2000000,1000000,50,50,#ff0000\n",
            encoding='utf-8'
        )
        reader = LayerReader(PaletteColorPolicy(['#123456']))
        layers, total_limit = reader.read(path)

        assert total_limit is None
        assert [l.id for l in layers] == [1, 3]
        assert [l.layer_type for l in layers] == ['primary', 'xol']
        assert layers[0].color == '#123456'
        assert layers[1].color == '#ff0000'
        assert layers[1].attachment == '1000000'

    def test_duplicate_ids_renumbered(self, tmp_path):
        path = tmp_path / "dupes.tsv"
        path.write_text("id\tlayer_type\tshare\n1\tprimary\t10\n1\tprimary\t20\n", encoding='utf-8')
        layers, _ = read_layers(path)
        assert [l.id for l in layers] == [1, 2]

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_layers(tmp_path / "missing.tsv")

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "layers.json"
        path.write_text("[]", encoding='utf-8')
        with pytest.raises(ValueError):
            read_layers(path)

    def test_missing_type_column(self, tmp_path):
        path = tmp_path / "layers.tsv"
        path.write_text("id\tshare\n1\t10\n", encoding='utf-8')
        with pytest.raises(ValueError):
            read_layers(path)
