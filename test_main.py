import io

import pytest

import config_paths
import main


@pytest.fixture
def cli(tmp_path, monkeypatch):
    monkeypatch.setattr(config_paths, "CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.setattr(config_paths, "CONFIG_JSON", str(tmp_path / "config" / "config.json"))
    monkeypatch.setattr(config_paths, "configure_logging", lambda level: None)
    data_dir = str(tmp_path / "tables")

    def run(*argv):
        out, err = io.StringIO(), io.StringIO()
        code = main.run(["--data-dir", data_dir, *argv], out=out, err=err)
        return code, out.getvalue(), err.getvalue()

    return run


def test_version(cli):
    code, out, _ = cli("--version")
    assert code == 0
    assert out.strip() == main.__version__


def test_create_then_list_and_show(cli):
    code, out, _ = cli("create", "Tasks")
    assert code == 0
    table_id = out.strip()

    code, out, _ = cli("list")
    assert code == 0
    assert f"* {table_id}\tTasks" in out

    code, out, _ = cli("show")
    assert code == 0
    assert "名称:Text" in out


def test_columns_rows_and_cells_persist_between_runs(cli):
    cli("create", "Tasks")
    assert cli("add-column", "Done", "checkbox")[0] == 0
    code, out, _ = cli("add-row")
    row_id = out.strip()

    assert cli("set", row_id, "Done", "yes")[0] == 0

    _, out, _ = cli("show")
    line = next(l for l in out.splitlines() if l.startswith(row_id))
    assert line.endswith("[x]")


def test_duplicate_column_is_rejected(cli):
    cli("create", "Tasks")
    code, _, err = cli("add-column", "名称", "Text")
    assert code == 1
    assert "already exists" in err


def test_commands_need_a_table(cli):
    code, _, err = cli("add-row")
    assert code == 1
    assert "No active table" in err


def test_move_columns_by_name(cli):
    cli("create", "Tasks")
    cli("add-column", "Done", "Checkbox")
    assert cli("move", "column", "Done", "名称")[0] == 0
    _, out, _ = cli("show")
    assert out.splitlines()[1] == "row_id\tDone:Checkbox\t名称:Text"


def test_move_onto_itself_succeeds_without_change(cli):
    cli("create", "Tasks")
    cli("add-column", "Done", "Checkbox")
    code, _, err = cli("move", "column", "Done", "Done")
    assert code == 0
    assert err == ""
    _, out, _ = cli("show")
    assert out.splitlines()[1] == "row_id\t名称:Text\tDone:Checkbox"


def test_select_options(cli):
    cli("create", "Tasks")
    cli("add-column", "Status", "SingleSelect")
    assert cli("add-option", "Status", "Open")[0] == 0
    _, out, _ = cli("add-row")
    row_id = out.strip()
    cli("set", row_id, "Status", "Open")
    _, out, _ = cli("show")
    assert next(l for l in out.splitlines() if l.startswith(row_id)).endswith("Open")


def test_delete_table(cli):
    _, out, _ = cli("create", "Tmp")
    table_id = out.strip()
    assert cli("delete", table_id)[0] == 0
    assert cli("delete", table_id)[0] == 1
    assert cli("list")[1] == ""


def test_unknown_table_flag(cli):
    code, _, err = cli("--table", "ghost", "show")
    assert code == 1
    assert "ghost" in err


def test_export_csv(cli, tmp_path):
    cli("create", "Tasks")
    target = tmp_path / "tasks.csv"
    code, out, _ = cli("export", str(target))
    assert code == 0
    assert target.read_text(encoding="utf-8").splitlines()[0] == "名称"


def test_export_bad_extension(cli, tmp_path):
    cli("create", "Tasks")
    code, _, err = cli("export", str(tmp_path / "tasks.h5"))
    assert code == 2
    assert "Unsupported" in err
