"""
Kaleidoscope Top-Level Driver Test Suite
========================================

Tests for the read loop: dispatch on the current token, hand-off to the
backend, error reporting and one-token resynchronization.

Test Organization
-----------------
- TestDispatch: definitions, externs, expressions and separators
- TestRecovery: syntax errors and lexical faults
- TestStateMachine: step-by-step state transitions
- TestBackendHandoff: backend results and reporting options
- TestPrompt: interactive prompt output
- TestErrorCollector: error locations and retention limits
"""

import io

from kaleidoscope.frontend.lexer import Lexer
from kaleidoscope.frontend.parser import Parser
from kaleidoscope.frontend.ast import (
    NumberLiteral,
    VariableRef,
    BinaryOp,
    Call,
    Prototype,
    Function,
)
from kaleidoscope.frontend.backend import BackendResult, CollectingBackend
from kaleidoscope.frontend.driver import (
    TopLevelDriver,
    DriverOptions,
    DriverState,
    parse_source,
)
from kaleidoscope.frontend.errors import (
    BackendError,
    ErrorCollector,
    KSyntaxError,
    LexicalFault,
)


# =============================================================================
# Helpers
# =============================================================================

def make_driver(source: str, backend=None, options=None, reporter=None) -> TopLevelDriver:
    """Create a driver over source with a collecting backend by default."""
    return TopLevelDriver(
        Parser(Lexer(source, "test.ks")),
        backend if backend is not None else CollectingBackend(),
        options,
        reporter,
    )


def anonymous(body) -> Function:
    return Function(Prototype("", []), body)


class RejectingBackend:
    """Backend that fails every node."""

    def __init__(self):
        self.seen = []

    def accept(self, node):
        self.seen.append(node)
        return BackendResult(error=BackendError("cannot compile", node_name="f"))


# =============================================================================
# Dispatch Tests
# =============================================================================

class TestDispatch:
    """Tests for choosing and running the right parse procedure."""

    def test_definition_and_call(self):
        """A definition then a call produce two constructs in order."""
        nodes = parse_source("def foo(x y) x+y; foo(1,2)")
        assert nodes == [
            Function(
                Prototype("foo", ["x", "y"]),
                BinaryOp("+", VariableRef("x"), VariableRef("y")),
            ),
            anonymous(Call("foo", [NumberLiteral(1.0), NumberLiteral(2.0)])),
        ]

    def test_source_order(self):
        """Constructs reach the backend strictly in source order."""
        nodes = parse_source("extern a(); def b() 1; 2")
        assert isinstance(nodes[0], Prototype)
        assert nodes[0].name == "a"
        assert nodes[1].prototype.name == "b"
        assert nodes[2].is_anonymous

    def test_semicolons_are_optional(self):
        """Constructs do not need separators."""
        nodes = parse_source("def f(x) x\nextern g()\nf(1)")
        assert len(nodes) == 3

    def test_only_separators(self):
        """Separators alone produce nothing."""
        reporter = ErrorCollector()
        assert parse_source(";;;", reporter=reporter) == []
        assert not reporter.has_errors()

    def test_comment_only(self):
        """A comment followed by end of input ends cleanly."""
        reporter = ErrorCollector()
        assert parse_source("# comment only\n", reporter=reporter) == []
        assert not reporter.has_errors()

    def test_empty_input(self):
        summary = make_driver("").run()
        assert summary.constructs == 0
        assert summary.error_count == 0


# =============================================================================
# Recovery Tests
# =============================================================================

class TestRecovery:
    """Tests for error reporting and resynchronization."""

    def test_unterminated_parenthesis_then_definition(self):
        """After '(1+2' fails, the next construct still parses."""
        reporter = ErrorCollector()
        nodes = parse_source("(1+2; def foo(x) x", reporter=reporter)

        assert reporter.error_count() == 1
        error = reporter.errors[0]
        assert isinstance(error, KSyntaxError)
        assert error.message == "expected ')'"
        assert nodes == [Function(Prototype("foo", ["x"]), VariableRef("x"))]

    def test_resync_skips_exactly_one_token(self):
        """Recovery discards only the token the failure stopped on."""
        reporter = ErrorCollector()
        nodes = parse_source("def foo(x) (x\nfoo(2)", reporter=reporter)

        # 'foo' is skipped; '(2)' is read as a new expression
        assert reporter.error_count() == 1
        assert nodes == [anonymous(NumberLiteral(2.0))]

    def test_lexical_fault_is_reported_and_skipped(self):
        """'1 $ 2' reports the fault and carries on with '2'."""
        reporter = ErrorCollector()
        driver = make_driver("1 $ 2", reporter=reporter)
        summary = driver.run()

        assert summary.lexical_faults == 1
        assert isinstance(reporter.errors[0], LexicalFault)
        assert reporter.errors[0].char == "$"
        assert driver.backend.nodes == [anonymous(NumberLiteral(2.0))]

    def test_fault_on_first_token(self):
        """A fault while reading the very first token is skipped too."""
        reporter = ErrorCollector()
        nodes = parse_source("@ 7", reporter=reporter)
        assert reporter.count(LexicalFault) == 1
        assert nodes == [anonymous(NumberLiteral(7.0))]

    def test_run_of_invalid_characters(self):
        """Each invalid character is reported once and the run ends."""
        reporter = ErrorCollector()
        summary = make_driver("$$$", reporter=reporter).run()
        assert summary.lexical_faults == 3
        assert summary.constructs == 0
        assert [e.char for e in reporter.errors] == ["$", "$", "$"]

    def test_one_error_per_construct(self):
        """Each malformed construct reports a single error."""
        reporter = ErrorCollector()
        nodes = parse_source("def 1; extern (; 4", reporter=reporter)
        assert reporter.count(KSyntaxError) == 2
        assert nodes == [anonymous(NumberLiteral(4.0))]

    def test_summary_counts(self):
        summary = make_driver("1; ); 2 # ok\n#").run()
        assert summary.constructs == 2
        assert summary.syntax_errors == 1
        assert summary.error_count == 1


# =============================================================================
# State Machine Tests
# =============================================================================

class TestStateMachine:
    """Tests for individual driver transitions."""

    def test_step_through(self):
        """Walk '1; )' one transition at a time."""
        driver = make_driver("1; )")

        assert driver.state == DriverState.AWAITING_CONSTRUCT
        assert driver.step() == DriverState.AWAITING_CONSTRUCT  # '1' parsed
        assert len(driver.backend.nodes) == 1
        assert driver.step() == DriverState.AWAITING_CONSTRUCT  # ';' consumed
        assert driver.step() == DriverState.ERROR               # ')' fails
        assert driver.step() == DriverState.AWAITING_CONSTRUCT  # skipped ')'
        assert driver.step() == DriverState.DONE                # EOF

    def test_done_is_terminal(self):
        driver = make_driver("")
        driver.run()
        assert driver.state == DriverState.DONE
        assert driver.step() == DriverState.DONE

    def test_lexical_fault_enters_error_state(self):
        driver = make_driver("1 $")
        assert driver.step() == DriverState.ERROR
        assert driver.step() == DriverState.AWAITING_CONSTRUCT
        assert driver.step() == DriverState.DONE


# =============================================================================
# Backend Hand-off Tests
# =============================================================================

class TestBackendHandoff:
    """Tests for passing constructs to the backend."""

    def test_backend_failure_is_reported(self):
        """Backend errors go to the reporter and do not stop the loop."""
        reporter = ErrorCollector()
        backend = RejectingBackend()
        summary = make_driver("def f() 1; f()", backend, reporter=reporter).run()

        assert len(backend.seen) == 2
        assert summary.backend_failures == 2
        assert reporter.count(BackendError) == 2
        assert "cannot compile" in str(reporter.errors[0])

    def test_backend_failure_reporting_can_be_disabled(self):
        reporter = ErrorCollector()
        options = DriverOptions(report_backend_errors=False)
        summary = make_driver("f()", RejectingBackend(), options, reporter).run()

        assert summary.backend_failures == 1
        assert not reporter.has_errors()

    def test_failed_constructs_never_reach_backend(self):
        backend = CollectingBackend()
        make_driver("def f(x) (x; (1", backend).run()
        assert backend.nodes == []

    def test_errors_are_echoed(self):
        """An echo stream receives each error as it is reported."""
        echo = io.StringIO()
        parse_source("(1", reporter=ErrorCollector(echo=echo))
        assert echo.getvalue().startswith("<input>:1:")
        assert "error: expected ')'" in echo.getvalue()

    def test_collector_report(self):
        reporter = ErrorCollector()
        parse_source(") )", reporter=reporter)
        report = reporter.report()
        assert report.endswith("2 errors")
        reporter.clear()
        assert not reporter.has_errors()


# =============================================================================
# Prompt Tests
# =============================================================================

class TestPrompt:
    """Tests for the interactive prompt."""

    def test_no_prompt_by_default(self, capsys):
        make_driver("1").run()
        assert capsys.readouterr().err == ""

    def test_prompt_before_each_step(self):
        """The prompt is written each time a construct is awaited."""
        stream = io.StringIO()
        options = DriverOptions(prompt="> ", prompt_stream=stream)
        make_driver("1;2", options=options).run()
        assert stream.getvalue() == "> " * 4


# =============================================================================
# Error Collector Tests
# =============================================================================

class TestErrorCollector:
    """Tests for the reporting channel."""

    def test_error_at_end_of_input_has_real_column(self):
        """An error on EOF after a newline points at column 1, not 0."""
        reporter = ErrorCollector()
        parse_source("(1\n", reporter=reporter)
        location = reporter.errors[0].location
        assert (location.line, location.column) == (2, 1)

    def test_max_errors_limits_retention(self):
        """Errors past the cap are counted and echoed but not kept."""
        echo = io.StringIO()
        reporter = ErrorCollector(echo=echo, max_errors=2)
        parse_source(") ) ) )", reporter=reporter)

        assert len(reporter.errors) == 2
        assert reporter.dropped == 2
        assert reporter.error_count() == 4
        assert echo.getvalue().count("error: unexpected token") == 4
        assert reporter.report().endswith("(2 more not shown)\n4 errors")

    def test_clear_resets_dropped(self):
        reporter = ErrorCollector(max_errors=0)
        parse_source(")", reporter=reporter)
        assert reporter.errors == []
        assert reporter.has_errors()
        reporter.clear()
        assert not reporter.has_errors()
