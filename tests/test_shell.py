from privatelab.constants import PS1_LINE
from privatelab.shell import ensure_prompt_line


def test_prompt_line_creates_file(tmp_path):
    bashrc = tmp_path / "etc" / "bash.bashrc"
    assert ensure_prompt_line(bashrc)
    assert bashrc.read_text() == PS1_LINE + "\n"


def test_prompt_line_is_appended_once(tmp_path):
    bashrc = tmp_path / "bash.bashrc"
    bashrc.write_text("# system-wide bashrc")
    assert ensure_prompt_line(bashrc)
    assert not ensure_prompt_line(bashrc)
    assert bashrc.read_text() == f"# system-wide bashrc\n{PS1_LINE}\n"
