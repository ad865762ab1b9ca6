"""
Shared pytest fixtures for MudMap tests

Supports both development mode (python -m pytest from repo root) and installed mode (pip install -e .)
"""
import pytest
from pathlib import Path
import sys

import matplotlib
matplotlib.use('Agg')


@pytest.fixture(scope="session", autouse=True)
def setup_mudmap_path():
    """
    Add repository root to Python path for development mode

    Structure:
      repo/                 <- repo root (need to add this to sys.path)
      └── mudmap/           <- package
          └── tests/
              └── conftest.py   <- we are here
    """
    repo_root = Path(__file__).parent.parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


@pytest.fixture
def paired_tower():
    """
    One primary with one xol on top of it

    Primary 1M at 50%, xol 2M attached at 1M at 50%, total limit 3M.
    """
    from mudmap.layout import Layer
    layers = [
        Layer(id=1, layer_type='primary', limit='1000000', attachment='0',
              premium='100', share='50', color='#1f77b4', insurer='Alpha'),
        Layer(id=2, layer_type='xol', limit='2000000', attachment='1000000',
              premium='50', share='50', color='hsl(120, 70%, 50%)', insurer='Beta'),
    ]
    return layers, 3000000


@pytest.fixture
def mixed_tower():
    """
    Quota-share, primaries and xol layers in scrambled order

    Expected horizontal order after sorting by premium:
      qs-11 (premium 10), qs-10 (premium 20), p-21 (premium 5), p-20 (premium 30)
    """
    from mudmap.layout import Layer
    layers = [
        Layer(id=20, layer_type='primary', limit='2,000,000', premium='30', share='20',
              attachment='0', color='#9467bd', insurer='P-High'),
        Layer(id=10, layer_type='quotashare', limit='5000000', premium='20', share='25',
              attachment='0', color='#ff7f0e', insurer='QS-B'),
        Layer(id=30, layer_type='xol', limit='3000000', attachment='2000000', premium='40',
              share='20', color='#8c564b', insurer='X-On-P20'),
        Layer(id=11, layer_type='quotashare', limit='5000000', premium='10', share='15',
              attachment='0', color='#2ca02c', insurer='QS-A'),
        Layer(id=21, layer_type='primary', limit='1000000', premium='5', share='40',
              attachment='0', color='#d62728', insurer='P-Low'),
        Layer(id=31, layer_type='xol', limit='1000000', attachment='7000000', premium='1',
              share='10', color='#e377c2', insurer='Orphan'),
    ]
    return layers, '10,000,000'


@pytest.fixture
def tower_tsv(tmp_path, mixed_tower):
    """Mixed tower saved in intermediate format"""
    from mudmap.io import write_intermediate
    layers, total_limit = mixed_tower
    path = tmp_path / "tower.tsv"
    write_intermediate(layers, path, total_limit)
    return path


# Pytest configuration
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual functions"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests writing files and running subcommands"
    )
