import argparse
import sys

from _version import __version__
import config_paths
from app_context import open_context
from cell_policy import normalize_cell_value
from table_errors import PersistenceError
from table_export import TableExportHandler
from table_model import ColumnType, ordered_columns, ordered_rows

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_ERROR = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tablekeep", description="local typed tables")
    parser.add_argument("-v", "--version", action="store_true", help="print version and exit")
    parser.add_argument("--data-dir", help="directory holding table records")
    parser.add_argument("--table", help="id of the table to act on (default: first)")
    parser.add_argument("--verbose", action="store_true", help="log at INFO level")

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("list", help="list tables")
    sub.add_parser("show", help="print the active table")

    p = sub.add_parser("create", help="create a table")
    p.add_argument("name")

    p = sub.add_parser("delete", help="delete a table")
    p.add_argument("table_id")

    p = sub.add_parser("add-column", help="add a column to the active table")
    p.add_argument("name")
    p.add_argument("type", help=", ".join(t.value for t in ColumnType))

    p = sub.add_parser("delete-column", help="delete a column (id or name)")
    p.add_argument("column")

    sub.add_parser("add-row", help="append a row")

    p = sub.add_parser("delete-row", help="delete a row")
    p.add_argument("row_id")

    p = sub.add_parser("set", help="edit one cell")
    p.add_argument("row_id")
    p.add_argument("column")
    p.add_argument("value")

    p = sub.add_parser("add-option", help="add an option to a select column")
    p.add_argument("column")
    p.add_argument("name")

    p = sub.add_parser("move", help="move a row or column onto another one's slot")
    p.add_argument("kind", choices=["row", "column"])
    p.add_argument("active_id")
    p.add_argument("over_id")

    p = sub.add_parser("export", help="write the active table to .csv/.parquet/.xlsx")
    p.add_argument("path")
    p.add_argument("--all", action="store_true", help="every table, one sheet each (.xlsx)")
    return parser


def _resolve_column(table, ref):
    if table is None:
        return ref
    col = table.column(ref) or table.column_by_name(ref)
    return col.id if col is not None else ref


def _format_value(col, value) -> str:
    if value is None:
        return ""
    if col.type == ColumnType.SINGLE_SELECT:
        opt = col.option(value)
        return opt.name if opt else str(value)
    if col.type == ColumnType.MULTI_SELECT:
        return ", ".join(o.name for o in (col.option(v) for v in value or []) if o)
    if col.type == ColumnType.CHECKBOX:
        return "[x]" if value else "[ ]"
    return str(value)


def _print_table(table, out):
    cols = ordered_columns(table)
    print(f"{table.name} ({table.id})", file=out)
    header = ["row_id"] + [f"{c.name}:{c.type.value}" for c in cols]
    print("\t".join(header), file=out)
    for row_id, values in ordered_rows(table):
        cells = [_format_value(c, v) for c, v in zip(cols, values)]
        print("\t".join([row_id] + cells), file=out)


def _rejected(engine, out_err) -> int:
    err = engine.last_error
    print(f"Rejected: {err}" if err else "Rejected", file=out_err)
    return EXIT_REJECTED


def run(argv, out=sys.stdout, err=sys.stderr) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__, file=out)
        return EXIT_OK
    if not args.command:
        parser.print_help(file=out)
        return EXIT_ERROR

    cfg = config_paths.load_config()
    if args.data_dir:
        cfg["DATA_DIR"] = args.data_dir
    config_paths.configure_logging("INFO" if args.verbose else cfg["LOG_LEVEL"])
    config_paths.ensure_config_dirs(cfg["DATA_DIR"])

    ctx = open_context(cfg)
    registry = ctx.registry
    if args.table:
        if registry.get_table(args.table) is None:
            print(f"No table with id '{args.table}'", file=err)
            return EXIT_REJECTED
        registry.set_active(args.table)
    table = registry.active_table()

    try:
        if args.command == "list":
            for t in registry.table_list:
                marker = "*" if t.id == registry.active_table_id else " "
                print(f"{marker} {t.id}\t{t.name}\t{len(t.columns)} cols\t{len(t.rows)} rows", file=out)
            return EXIT_OK

        if args.command == "create":
            created = registry.create_table(args.name)
            print(created.id, file=out)
            return EXIT_OK

        if args.command == "delete":
            if not registry.delete_table(args.table_id):
                return _rejected(registry, err)
            return EXIT_OK

        if args.command == "show":
            if table is None:
                print("No tables", file=err)
                return EXIT_REJECTED
            _print_table(table, out)
            return EXIT_OK

        if args.command == "add-column":
            column = ctx.editor.add_column(args.name, args.type)
            if column is None:
                return _rejected(ctx.editor, err)
            print(column.id, file=out)
            return EXIT_OK

        if args.command == "delete-column":
            if not ctx.editor.delete_column(_resolve_column(table, args.column)):
                return _rejected(ctx.editor, err)
            return EXIT_OK

        if args.command == "add-row":
            row_id = ctx.editor.add_row()
            if row_id is None:
                return _rejected(ctx.editor, err)
            print(row_id, file=out)
            return EXIT_OK

        if args.command == "delete-row":
            if not ctx.editor.delete_row(args.row_id):
                return _rejected(ctx.editor, err)
            return EXIT_OK

        if args.command == "set":
            column_id = _resolve_column(table, args.column)
            value = args.value
            col = table.column(column_id) if table is not None else None
            row = table.rows.get(args.row_id) if table is not None else None
            if col is not None and row is not None:
                previous = row[column_id].value if column_id in row else None
                value = normalize_cell_value(col, args.value, previous)
            if not ctx.editor.edit_cell(args.row_id, column_id, value):
                return _rejected(ctx.editor, err)
            return EXIT_OK

        if args.command == "add-option":
            option = ctx.editor.add_select_option(_resolve_column(table, args.column), args.name)
            if option is None:
                return _rejected(ctx.editor, err)
            print(option.id, file=out)
            return EXIT_OK

        if args.command == "move":
            active_id, over_id = args.active_id, args.over_id
            if args.kind == "column":
                active_id = _resolve_column(table, active_id)
                over_id = _resolve_column(table, over_id)
            if table is not None and active_id == over_id:
                return EXIT_OK
            if not ctx.ordering.move(args.kind, active_id, over_id):
                return _rejected(ctx.ordering, err)
            return EXIT_OK

        if args.command == "export":
            if table is None:
                print("No tables", file=err)
                return EXIT_REJECTED
            try:
                handler = TableExportHandler(args.path)
                if args.all:
                    handler.save_workbook(registry.table_list)
                else:
                    handler.save(table)
            except (ValueError, RuntimeError, OSError) as exc:
                print(f"Export failed: {exc}", file=err)
                return EXIT_ERROR
            print(f"Saved {args.path}", file=out)
            return EXIT_OK
    except PersistenceError as exc:
        print(f"Save failed: {exc}", file=err)
        return EXIT_ERROR

    parser.print_help(file=out)
    return EXIT_ERROR


def main():
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()
