import pytest

from freqstat.cli import main


def test_count_command(tmp_path, capsys):
    a = tmp_path / "a.txt"
    a.write_bytes(b"Hello hello world")
    rc = main(["count", "--file", f"{a}:3", "--pattern", "words", "--no-progress"])
    assert rc == 0
    out = capsys.readouterr().out
    assert out == "hello 2\nworld 1\n\n"


def test_ngrams_command_with_limit(tmp_path, capsys):
    a = tmp_path / "a.txt"
    a.write_bytes(b"to be or not to be")
    rc = main(["ngrams", "-n", "2", "--file", str(a), "--max-results", "1", "--no-progress"])
    assert rc == 0
    assert capsys.readouterr().out == "to be 2\n\n"


def test_config_file(tmp_path, capsys):
    a = tmp_path / "a.txt"
    a.write_bytes(b"ab")
    conf = tmp_path / "conf.yaml"
    conf.write_text(f"pattern: letter_digraphs\nprogress: false\nfiles:\n  - {{path: '{a}', multiplier: 7}}\n")
    assert main(["count", "--config", str(conf)]) == 0
    assert capsys.readouterr().out == "ab 7\n\n"


def test_all_files_failing_exits_nonzero(tmp_path, capsys):
    rc = main(["count", "--file", str(tmp_path / "nope.txt"), "--no-progress"])
    assert rc == 1
    assert capsys.readouterr().out == "\n"


def test_patterns_command(capsys):
    assert main(["patterns"]) == 0
    assert "letter_digraphs" in capsys.readouterr().out


@pytest.mark.parametrize(
    "body",
    [
        "word_count: two\n",
        "max_results: [1, 2]\n",
        "files:\n  - {path: a.txt, multiplier: lots}\n",
        "pattern: [unclosed\n",
        "- just\n- a list\n",
    ],
)
def test_bad_config_file_is_a_usage_error(tmp_path, capsys, body):
    conf = tmp_path / "conf.yaml"
    conf.write_text(body)
    with pytest.raises(SystemExit) as exc:
        main(["ngrams", "--config", str(conf), "--no-progress"])
    assert exc.value.code == 2
    err = capsys.readouterr().err
    assert "error:" in err
    assert "no corpus files" not in err


def test_nan_multiplier_is_a_usage_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["count", "--file", "a.txt:nan", "--no-progress"])
    assert exc.value.code == 2
    assert "finite" in capsys.readouterr().err
