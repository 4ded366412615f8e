#!/usr/bin/env python3
"""
controller_example.py

Runs the redundant response-declaration rule over an in-memory model of
this controller::

    [ApiController]
    [Route("[controller]")]
    public class ControllerExample : ControllerBase
    {
        [HttpGet]
        [ProducesResponseType(typeof(string), StatusCodes.Status200OK)]
        [ProducesResponseType(typeof(int), StatusCodes.Status200OK)]      // flagged
        [ProducesResponseType(StatusCodes.Status400BadRequest)]
        public IActionResult Get()
        {
            return BadRequest();
            return Ok("result");
        }

        [HttpPost]
        [ProducesResponseType(typeof(string), StatusCodes.Status200OK)]   // flagged
        [ProducesResponseType(StatusCodes.Status400BadRequest)]           // flagged
        public IActionResult Post()
        {
            return new ObjectResult("result");
        }
    }

Usage:
    python examples/controller_example.py [-v] [--format gcc|json]
                                          [--severity LEVEL] [--jobs N]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from producescheck import (
    CheckerRunner,
    ConfigurationError,
    InMemoryModel,
    Method,
    configure_logging,
)
from producescheck.symbols import (
    INT32,
    STRING,
    Call,
    MethodDeclaration,
    Return,
    SourceSpan,
    ValueExpr,
    mvc_types,
    produces,
)

_log = logging.getLogger("controller_example")

SOURCE = "ControllerExample.cs"


def build_controller() -> List[Method]:
    t = mvc_types()

    def at(line: int) -> SourceSpan:
        return SourceSpan(SOURCE, line, 6, line, 67)

    get = Method(
        name="Get",
        attributes=(
            produces(200, STRING, location=at(12)),
            produces(200, INT32, location=at(13)),
            produces(400, location=at(14)),
        ),
        declarations=(MethodDeclaration(returns=(
            Return(Call("BadRequest", t["BadRequestResult"]), line=17),
            Return(Call("Ok", t["OkObjectResult"],
                        (ValueExpr(STRING, '"result"'),)), line=18),
        )),),
    )
    post = Method(
        name="Post",
        attributes=(
            produces(200, STRING, location=at(22)),
            produces(400, location=at(23)),
        ),
        declarations=(MethodDeclaration(returns=(
            Return(ValueExpr(t["ObjectResult"], 'new ObjectResult("result")'), line=26),
        )),),
    )
    return [get, post]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Report response declarations no return path produces.",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase verbosity (-v info, -vv debug).")
    parser.add_argument("--format", choices=("gcc", "json"), default="gcc")
    parser.add_argument("--severity", default=None,
                        help="Override diagnostic severity.")
    parser.add_argument("--jobs", type=int, default=1,
                        help="Worker threads for per-method analysis.")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)

    options = {}
    if args.severity:
        options["severity"] = args.severity
    try:
        runner = CheckerRunner(options=options, max_workers=args.jobs)
    except ConfigurationError as exc:
        _log.error("%s", exc)
        return 2

    results = runner.run(build_controller(), InMemoryModel())
    if args.format == "json":
        output = results.to_json_lines()
    else:
        output = results.to_gcc_format()
    if output:
        print(output)
    print(results.summary(), file=sys.stderr)
    return 1 if results.total_count else 0


if __name__ == "__main__":
    sys.exit(main())
