#!/usr/bin/env python3
"""
Main test runner for the bashparser tests.

Author: xwest
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

SAMPLE_SCRIPT = """#!/bin/sh
# Rotate logs and report
LOG_DIR=/var/log/app
for f in app.log error.log; do
    gzip $f
done
if test -d $LOG_DIR; then
    ls $LOG_DIR | wc -l > count.txt
else
    echo "missing log directory"
fi
function report() {
    cat count.txt
}
report
"""


def run_smoke_test():
    """Scan and parse a representative script end to end."""

    print("bashparser Test Suite")
    print("=" * 60)

    try:
        from bashparser.lexer import Lexer
        from bashparser.parser import Parser, ParseError
        print("✅ Lexer and parser imported successfully")
    except ImportError as e:
        print(f"❌ Failed to import bashparser modules: {e}")
        return False

    try:
        print("  🔧 Lexing...")
        tokens = Lexer(SAMPLE_SCRIPT).tokenize()
        print(f"     Generated {len(tokens)} tokens")

        print("  🔧 Parsing...")
        parser = Parser(SAMPLE_SCRIPT)
        program = parser.parse()
        print(f"     Generated AST with {len(program.body)} top-level statements")

        for statement in program.body:
            print(f"       {statement.node_type.value} at line {statement.position.line}")

        if parser.warnings:
            print(f"     ⚠️  {len(parser.warnings)} tokens skipped")

    except ParseError as e:
        print(f"❌ Smoke test FAILED: {e}")
        print(e.format())
        return False

    print("✅ Smoke test PASSED")
    print()
    return True


def run_unit_tests():
    """Discover and run everything under tests/."""
    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"))
    result = unittest.TextTestRunner(verbosity=2).run(suite)
    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_smoke_test() and run_unit_tests()
    sys.exit(0 if success else 1)
