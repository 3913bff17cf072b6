import os
import subprocess
import sys


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


def run_cli(*args, cwd=None):
    cli = os.path.join(ROOT, "cli.py")
    return subprocess.run(
        [sys.executable, cli, *args],
        text=True,
        capture_output=True,
        cwd=cwd or ROOT,
        timeout=10,
    )


def write_script(tmp_path, source, name="script.ql"):
    path = tmp_path / name
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_precedence_output(tmp_path):
    path = write_script(tmp_path, "print 1 + 2 * 3;\nprint (1 + 2) * 3;\n")
    proc = run_cli(path)
    if proc.returncode != 0:
        raise AssertionError(f"exit {proc.returncode}\nSTDOUT:\n{proc.stdout}\nSTDERR:\n{proc.stderr}")
    if proc.stdout.splitlines() != ["7", "9"]:
        raise AssertionError(f"Expected 7 and 9.\nOUT:\n{proc.stdout}")


def test_while_loop_output(tmp_path):
    path = write_script(tmp_path, "i = 0;\nwhile i < 3 { print i; i = i + 1; }\n")
    proc = run_cli(path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert proc.stdout.splitlines() == ["0", "1", "2"]


def test_usage_on_wrong_argument_count(tmp_path):
    proc = run_cli()
    assert proc.returncode == 1
    assert "Usage" in proc.stdout

    path = write_script(tmp_path, "print 1;")
    proc = run_cli(path, path)
    assert proc.returncode == 1
    assert "Usage" in proc.stdout
    assert "1\n" not in proc.stdout


def test_missing_script_reports_os_error(tmp_path):
    proc = run_cli(str(tmp_path / "nope.ql"))
    assert proc.returncode == 1
    assert "cannot read" in proc.stdout


def test_parse_error_stops_before_evaluation(tmp_path):
    path = write_script(tmp_path, 'print "before";\nprint 1 +;\n')
    proc = run_cli(path)
    assert proc.returncode == 1
    assert "before" not in proc.stdout
    assert "Parse error" in proc.stdout
    assert "line 2" in proc.stdout


def test_lex_error_stops_before_evaluation(tmp_path):
    path = write_script(tmp_path, 'print "before";\nprint 1 & 2;\n')
    proc = run_cli(path)
    assert proc.returncode == 1
    assert "before" not in proc.stdout
    assert "Lex error" in proc.stdout


def test_eval_error_after_earlier_output(tmp_path):
    path = write_script(tmp_path, 'print "before";\nprint 1 / 0;\nprint "after";\n')
    proc = run_cli(path)
    assert proc.returncode == 1
    lines = proc.stdout.splitlines()
    assert lines[0] == "before"
    assert "Runtime error: Division by zero" in lines[1]
    assert "after" not in proc.stdout


def test_file_builtins_resolve_against_script_dir(tmp_path):
    (tmp_path / "in.txt").write_text("hello", encoding="utf-8")
    path = write_script(
        tmp_path,
        'text = read_file("in.txt");\nwrite_file("out.txt", uppercase(text));\nprint read_file("out.txt");\n',
    )
    proc = run_cli(path, cwd=ROOT)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert proc.stdout.splitlines() == ["HELLO"]
    assert (tmp_path / "out.txt").read_text(encoding="utf-8") == "HELLO"


def test_ast_dump_does_not_run(tmp_path):
    path = write_script(tmp_path, "x = 1 + 2;\nprint x;\n")
    proc = run_cli("--ast", path)
    assert proc.returncode == 0, proc.stdout + proc.stderr
    assert "type: Program" in proc.stdout
    assert "type: Assign" in proc.stdout
    assert "op: +" in proc.stdout
    assert "3" not in proc.stdout.splitlines()
    assert "- type: Assign" in proc.stdout


def test_unknown_function_reported_after_output(tmp_path):
    path = write_script(tmp_path, "print 1;\nprint foo(1);\n")
    proc = run_cli(path)
    assert proc.returncode == 1
    lines = proc.stdout.splitlines()
    assert lines[0] == "1"
    assert "Runtime error: Unknown function: foo" in lines[1]


def test_deep_nesting_reports_error_without_traceback(tmp_path):
    path = write_script(tmp_path, "print " + "(" * 5000 + "1" + ")" * 5000 + ";\n")
    proc = run_cli(path)
    assert proc.returncode == 1
    assert "Parse error: Program nested too deeply" in proc.stdout
    assert "Traceback" not in proc.stderr


if __name__ == "__main__":
    import tempfile
    from pathlib import Path

    with tempfile.TemporaryDirectory() as d:
        test_precedence_output(Path(d))
    print("ok")
