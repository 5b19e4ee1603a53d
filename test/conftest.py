"""
Test configuration for MiniC tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser


@pytest.fixture
def parse_body():
  """Parse a function body wrapped in a fixed one-parameter header"""
  parser = create_parser()

  def parse(body: str):
    return parser.parse_string(f"function main(int arg) {body}")

  return parse
