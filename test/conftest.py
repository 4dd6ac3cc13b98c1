"""
Test configuration for Monkey parser and interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from parsing import create_parser
from interpreter import create_interpreter
from stdlib import make_io


@pytest.fixture
def parser():
  """Provide a fresh parser instance for each test"""
  return create_parser()


@pytest.fixture
def console():
  """Scripted I/O capability recording prompts and written lines"""
  state = {'inputs': [], 'prompts': [], 'output': []}

  def read_line(prompt):
    state['prompts'].append(prompt)
    if not state['inputs']:
      raise EOFError
    return state['inputs'].pop(0)

  def write_line(text):
    state['output'].append(text)

  state['io'] = make_io(read_line, write_line)
  return state


@pytest.fixture
def interpreter(console):
  """Provide a fresh interpreter wired to the scripted console"""
  return create_interpreter(io=console['io'])
