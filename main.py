# main.py
"""
Command-line front end: read one E-model parameter record (JSON) from a
file or stdin, print R.

    python main.py -f link.json [-v] [--mos] [--strict]
    cat link.json | python main.py --stdin
"""

from __future__ import annotations
import argparse, json, logging, sys
from dataclasses import dataclass
from typing import Dict, IO, List, Optional

from params import EModelParams
from emodel import evaluate, mos_from_r
from loader import EModelInputError, load_params, ensure_in_range

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INPUT_ERROR = 1
EXIT_USAGE = 2


@dataclass
class RunConfig:
    input_path: Optional[str] = None
    use_stdin: bool = False
    verbose: bool = False
    show_mos: bool = False
    strict: bool = False
    log_level: str = "WARNING"

    @property
    def has_source(self) -> bool:
        return self.use_stdin or bool(self.input_path)


# ---------------------------
# Presentation
# ---------------------------
def format_params(params: EModelParams) -> str:
    return "Input parameters: " + json.dumps(params.to_dict(), indent="\t")

def format_breakdown(breakdown: Dict[str, float]) -> str:
    width = max(len(k) for k in breakdown)
    return "\n".join(f"{k:<{width}} = {v:.6f}" for k, v in breakdown.items() if k != "R")

def format_result(R: float) -> str:
    return "R = %f" % R

def format_mos(mos: float) -> str:
    return "MOS = %.2f" % mos


# ---------------------------
# Entry point
# ---------------------------
def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="emodel-r",
        description="ITU-T G.107 E-model transmission rating factor (R) calculator.")
    ap.add_argument("-f", "--file", dest="input_path", metavar="PATH",
                    help="input file with the parameter record (JSON)")
    ap.add_argument("--stdin", dest="use_stdin", action="store_true",
                    help="read the parameter record from stdin (JSON)")
    ap.add_argument("-v", "--verbose", action="store_true",
                    help="echo the parsed input and the intermediate quantities")
    ap.add_argument("--mos", dest="show_mos", action="store_true",
                    help="also print the estimated MOS (G.107 Annex B)")
    ap.add_argument("--strict", action="store_true",
                    help="reject parameters outside the G.107 permitted ranges")
    ap.add_argument("--log-level", default="WARNING",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                    help="diagnostics written to stderr")
    return ap


def config_from_args(argv: Optional[List[str]] = None) -> RunConfig:
    ns = build_parser().parse_args(argv)
    return RunConfig(input_path=ns.input_path, use_stdin=ns.use_stdin, verbose=ns.verbose,
                     show_mos=ns.show_mos, strict=ns.strict, log_level=ns.log_level)


def run(config: RunConfig, stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None,
        stderr: Optional[IO[str]] = None) -> int:
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    if not config.has_source:
        build_parser().print_usage(stderr)
        print("error: no input given (use -f PATH or --stdin)", file=stderr)
        return EXIT_USAGE

    try:
        params = load_params(stdin if config.use_stdin else config.input_path)
        if config.strict:
            ensure_in_range(params)
    except EModelInputError as e:
        logger.debug("input rejected", exc_info=True)
        print(f"error: {e}", file=stderr)
        return EXIT_INPUT_ERROR

    if config.verbose:
        print(format_params(params), file=stdout)

    breakdown = evaluate(params)
    R = breakdown["R"]
    logger.info("R=%.4f Ro=%.4f Is=%.4f Id=%.4f Ie_eff=%.4f",
                R, breakdown["Ro"], breakdown["Is"], breakdown["Id"], breakdown["Ie_eff"])

    if config.verbose:
        print(format_breakdown(breakdown), file=stdout)
    print(format_result(R), file=stdout)
    if config.show_mos:
        print(format_mos(mos_from_r(R)), file=stdout)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    config = config_from_args(argv)
    logging.basicConfig(level=getattr(logging, config.log_level),
                        format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)
    return run(config)


if __name__ == "__main__":
    sys.exit(main())
