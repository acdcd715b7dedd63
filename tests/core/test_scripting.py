# tests/core/test_scripting.py
import textwrap

import pytest

from scriptshell.core.context.shell_context import ShellContext
from scriptshell.core.errors import ScriptExecutionError, ShellError, UndefinedBinding, UnknownBuffer
from scriptshell.core.scripting.environment import EnvironmentManager, classify
from scriptshell.model import BindingKind, DispatchStatus


def write_script(tmp_path, name, source):
    path = tmp_path / name
    path.write_text(textwrap.dedent(source), encoding="utf-8")
    return path


# --- Retained and ephemeral environments ---

def test_retained_binding_is_visible_to_later_loads(ctx):
    """A function defined by one retained load can be called by the next."""
    ctx.scripts.run("def message():\n    return 'hello from setup'\n", handle="demo", retain=True)

    result = ctx.scripts.run("message()", handle="demo", retain=True)

    assert result.value == "hello from setup"
    assert result.environment == "demo"
    assert result.retained


def test_ephemeral_load_does_not_see_retained_bindings(ctx):
    ctx.scripts.run("def message():\n    return 'hi'\n", handle="demo", retain=True)

    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run("message()", handle="fresh", retain=False)

    cause = exc_info.value.cause
    assert isinstance(cause, UndefinedBinding)
    assert cause.name == "message"


def test_ephemeral_environment_is_discarded(ctx):
    result = ctx.scripts.run("x = 1", retain=False)

    assert not result.retained
    assert result.environment.startswith("ephemeral-")
    assert ctx.environments.handles() == []
    with pytest.raises(ScriptExecutionError):
        ctx.scripts.run("x", retain=False)


def test_ephemeral_load_ignores_a_retained_handle(ctx):
    """Without retain, even an existing handle gives a fresh environment."""
    ctx.scripts.run("value = 'kept'", handle="demo", retain=True)
    with pytest.raises(ScriptExecutionError):
        ctx.scripts.run("value", handle="demo", retain=False)


def test_last_definition_wins(ctx):
    ctx.scripts.run("def pick():\n    return 1\n", handle="h", retain=True)
    ctx.scripts.run("def pick():\n    return 2\n", handle="h", retain=True)

    assert ctx.scripts.call("h", "pick") == 2


def test_result_lists_defined_names(ctx):
    ctx.scripts.run("a = 1", handle="h", retain=True)
    result = ctx.scripts.run("b = 2\ndef c():\n    pass\n", handle="h", retain=True)

    assert result.defined == ["b", "c"]
    assert result.value is None


def test_definitions_before_a_failure_are_kept(ctx):
    with pytest.raises(ScriptExecutionError):
        ctx.scripts.run("before = 1\nnot_defined_anywhere()\nafter = 2\n", handle="p", retain=True)

    env = ctx.environments.get("p")
    assert env.has("before")
    assert not env.has("after")
    assert env.loads == 1


def test_syntax_error_creates_no_environment(ctx):
    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run("def broken(:\n", handle="bad", retain=True, filename="bad.py")

    assert isinstance(exc_info.value.cause, SyntaxError)
    assert "bad.py" in exc_info.value.message
    assert "bad" not in ctx.environments


def test_undecodable_script_file(ctx, tmp_path):
    script = tmp_path / "latin1.py"
    script.write_bytes(b"x = '\xff'\n")

    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run_file(script, handle="h", retain=True)

    assert isinstance(exc_info.value.cause, UnicodeDecodeError)
    assert "h" not in ctx.environments


def test_null_bytes_in_source(ctx):
    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run("x = 1\0\n", handle="h", retain=True)

    assert isinstance(exc_info.value.cause, (SyntaxError, ValueError))
    assert "h" not in ctx.environments


def test_other_exceptions_are_wrapped(ctx):
    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run("1 / 0", retain=False)
    assert isinstance(exc_info.value.cause, ZeroDivisionError)


def test_sessions_have_independent_environments(engine):
    first, second = ShellContext(engine=engine), ShellContext(engine=engine)
    first.scripts.run("shared = 'first'", handle="default", retain=True)

    assert "default" not in second.environments
    with pytest.raises(ScriptExecutionError):
        second.scripts.run("shared", handle="default", retain=True)


# --- Host API ---

def test_print_and_println(ctx, capsys):
    ctx.scripts.run('print("a", "b")\nprint("c")\nprintln()\nprintln("done")\n')
    assert capsys.readouterr().out == "a bc\ndone\n"


def test_script_reads_captured_buffer(ctx, capsys):
    """A script captures a command and reads the buffer back."""
    source = """
        dispatch_command("capture buffer one echo 'hi from one'")
        scripting = get_plugin_instance("scripting")
        if scripting is None:
            raise RuntimeError("scripting plugin missing")
        println(scripting.get_buffer("one").strip())
        get_plugin_instance("no-such-plugin") is None
    """
    result = ctx.scripts.run(textwrap.dedent(source))

    assert result.value is True
    assert ctx.get_plugin_instance("scripting").get_buffer("one") == "hi from one\n"
    assert capsys.readouterr().out == "hi from one\n"


def test_get_buffer_for_unknown_name(ctx):
    with pytest.raises(ScriptExecutionError) as exc_info:
        ctx.scripts.run('get_plugin_instance("scripting").get_buffer("never")')
    assert isinstance(exc_info.value.cause, UnknownBuffer)


def test_failed_dispatch_does_not_abort_the_script(ctx, capsys):
    source = """
        result = dispatch_command("no_such_command")
        println("still running")
        result
    """
    result = ctx.scripts.run(textwrap.dedent(source))

    assert result.value.status == DispatchStatus.FAILURE
    captured = capsys.readouterr()
    assert captured.out == "still running\n"
    assert "unknown command" in captured.err


def test_shell_facade_variables(ctx):
    ctx.scripts.run('shell.set_var("answer", 42)')
    assert ctx.get("answer") == "42"
    assert ctx.scripts.run('shell.get_var("answer")').value == "42"


# --- Re-entrancy ---

def test_nested_load_into_same_retained_environment(ctx, tmp_path):
    inner = write_script(tmp_path, "inner.py", "inner_value = 'from inner'\n")
    source = f'dispatch_command("pyscript -r --env a {inner}").ok'

    result = ctx.scripts.run(source, handle="a", retain=True)

    assert result.value is True
    assert ctx.environments.get("a").value("inner_value") == "from inner"


def test_nested_load_into_other_environment_fails(ctx, tmp_path, capsys):
    inner = write_script(tmp_path, "inner.py", "inner_value = 1\n")
    source = f'dispatch_command("pyscript -r --env b {inner}").ok'

    result = ctx.scripts.run(source, handle="a", retain=True)

    assert result.value is False
    assert "b" not in ctx.environments
    assert "while a script is running" in capsys.readouterr().err


# --- Calls into retained environments ---

def test_call_function_binding(ctx):
    ctx.scripts.run("def add(a, b):\n    return a + b\n", handle="calc", retain=True)
    assert ctx.scripts.call("calc", "add", 2, 3) == 5


def test_call_errors(ctx):
    with pytest.raises(ShellError):
        ctx.scripts.call("absent", "anything")

    ctx.scripts.run("number = 7", handle="calc", retain=True)
    with pytest.raises(UndefinedBinding):
        ctx.scripts.call("calc", "missing")
    with pytest.raises(ShellError):
        ctx.scripts.call("calc", "number")


# --- Environment model ---

@pytest.mark.parametrize("value, kind", [
    (None, BindingKind.NONE),
    (True, BindingKind.BOOLEAN),
    (3, BindingKind.NUMBER),
    (2.5, BindingKind.NUMBER),
    ("text", BindingKind.TEXT),
    ({"a": 1}, BindingKind.STRUCTURED),
    ([1, 2], BindingKind.STRUCTURED),
    (len, BindingKind.FUNCTION),
    (object(), BindingKind.OBJECT),
])
def test_classify(value, kind):
    assert classify(value) == kind


def test_environment_bindings_exclude_host_api():
    manager = EnvironmentManager(host_api_factory=lambda: {"print": print, "shell": object()})
    env = manager.acquire("h", retain=True)
    env.define("greeting", "hi")

    assert env.user_names() == ["greeting"]
    binding = env.lookup("greeting")
    assert binding.kind == BindingKind.TEXT
    assert binding.summary == "'hi'"

    # An overwritten host name is a user binding
    env.define("print", "shadowed")
    assert env.has("print")


def test_environment_manager_handles():
    manager = EnvironmentManager(host_api_factory=dict)
    first = manager.acquire("one", retain=True)
    assert manager.acquire("one", retain=True) is first
    assert manager.handles() == ["one"]
    assert manager.drop("one") is True
    assert manager.get("one") is None
    with pytest.raises(ValueError):
        manager.acquire(None, retain=True)
    with pytest.raises(UndefinedBinding):
        first.value("nothing")


# --- Shell commands ---

def test_pyscript_command_with_retain(engine, ctx, tmp_path, capsys):
    setup = write_script(tmp_path, "setup.py", """
        def message():
            return "hi from setup"
    """)
    use = write_script(tmp_path, "use.py", 'println(message())\n')

    assert engine.dispatch(f"pyscript -r {setup}", ctx).ok
    assert engine.dispatch(f"python -r {use}", ctx).ok
    assert capsys.readouterr().out == "hi from setup\n"
    assert ctx.environments.handles() == [ctx.default_environment]

    result = engine.dispatch(f"pyscript {use}", ctx)
    assert not result.ok
    assert "'message' is not defined" in capsys.readouterr().err


def test_pyscript_command_with_named_environment(engine, ctx, tmp_path):
    script = write_script(tmp_path, "named.py", "counter = 1\n")
    engine.dispatch(f"pyscript -r --env work {script}", ctx)
    assert ctx.environments.get("work").value("counter") == 1


def test_pyscript_missing_file(engine, ctx, tmp_path, capsys):
    result = engine.dispatch(f"pyscript {tmp_path / 'missing.py'}", ctx)
    assert not result.ok
    assert "cannot read script" in capsys.readouterr().err


def test_env_commands(engine, ctx, capsys):
    ctx.scripts.run("def add(a, b):\n    return int(a) + int(b)\n", handle="calc", retain=True)

    assert engine.dispatch("env list", ctx).ok
    assert engine.dispatch("env show calc", ctx).ok
    assert engine.dispatch("env call --env calc add 2 3", ctx).ok
    out = capsys.readouterr().out
    assert "calc: 1 bindings, 1 script loads" in out
    assert "add" in out and "function" in out
    assert out.rstrip().endswith("5")

    assert engine.dispatch("env drop calc", ctx).ok
    assert not engine.dispatch("env show calc", ctx).ok
