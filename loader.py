# loader.py
"""
JSON input for the E-model: one object holding exactly the twenty
EModelParams field names, read from a file path or an open text stream.
"""

from __future__ import annotations
import json, logging, math
from pathlib import Path
from typing import IO, List, Union

from params import EModelParams, FIELDS, PERMITTED_RANGES

logger = logging.getLogger(__name__)

Source = Union[str, Path, IO[str]]


class EModelInputError(Exception):
    """Base class for failures at the input boundary."""

class InputSourceError(EModelInputError):
    """The input file cannot be opened or read."""

class ParamsDecodeError(EModelInputError):
    """The input is not a valid parameter record."""

class ParamsRangeError(EModelInputError):
    """One or more parameters fall outside the G.107 permitted ranges."""

    def __init__(self, problems: List[str]):
        super().__init__("; ".join(problems))
        self.problems = problems


def _read_text(source: Source) -> str:
    if isinstance(source, (str, Path)):
        path = Path(source)
        try:
            return path.read_text(encoding="utf-8")
        except OSError as e:
            raise InputSourceError(f"cannot open {path}: {e.strerror or e}") from e
    return source.read()


def parse_params(text: str) -> EModelParams:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ParamsDecodeError(f"malformed JSON: {e}") from e
    if not isinstance(data, dict):
        raise ParamsDecodeError(f"expected a JSON object, got {type(data).__name__}")
    try:
        return EModelParams.from_mapping(data)
    except (TypeError, ValueError) as e:
        raise ParamsDecodeError(str(e)) from e


def load_params(source: Source) -> EModelParams:
    """Read and decode one parameter record from a path or a text stream."""
    name = str(source) if isinstance(source, (str, Path)) else getattr(source, "name", "<stream>")
    logger.debug("reading parameters from %s", name)
    try:
        text = _read_text(source)
    except UnicodeDecodeError as e:
        raise ParamsDecodeError(f"input is not valid UTF-8: {e}") from e
    params = parse_params(text)
    logger.debug("decoded %d parameters from %s", len(FIELDS), name)
    return params


def check_ranges(params: EModelParams) -> List[str]:
    """Messages for every field outside its permitted range (empty if none)."""
    problems = []
    for k in FIELDS:
        v = getattr(params, k)
        lo, hi = PERMITTED_RANGES[k]
        if not math.isfinite(v):
            problems.append(f"{k}={v} is not finite")
        elif v < lo or v > hi:
            problems.append(f"{k}={v:g} outside permitted range [{lo:g}, {hi:g}]")
    return problems


def ensure_in_range(params: EModelParams) -> None:
    problems = check_ranges(params)
    if problems:
        for msg in problems:
            logger.warning("out of range: %s", msg)
        raise ParamsRangeError(problems)
