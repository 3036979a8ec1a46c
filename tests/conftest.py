"""
Pytest configuration file.

Sets up the Python path so test files can import from the python/ directory,
and provides fakes for HTTP responses and operator prompts.
"""
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
import requests

# Add python directory to path for all tests
_python_dir = Path(__file__).parent.parent / 'python'
_python_dir_abs = str(_python_dir.absolute())
if _python_dir_abs not in sys.path:
    sys.path.insert(0, _python_dir_abs)


def make_response(json_data=None, status_code=200, links=None, headers=None, reason=None):
    """Build a MagicMock standing in for requests.Response"""
    response = MagicMock(spec=requests.Response)
    response.status_code = status_code
    response.reason = reason or ('OK' if status_code < 400 else 'Error')
    response.headers = headers or {}
    response.links = links or {}
    response.json.return_value = json_data
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(
            f"{status_code} {response.reason}", response=response
        )
    else:
        response.raise_for_status.return_value = None
    return response


def next_link(url):
    return {'next': {'url': url}}


@pytest.fixture
def http():
    """requests.Session stand-in; tests program http.request"""
    session = MagicMock(spec=requests.Session)
    session.headers = {}
    return session


@pytest.fixture
def prompter():
    """Prompter stand-in; tests program select/checkbox/confirm/text/secret"""
    return MagicMock()
