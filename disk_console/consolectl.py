import argparse
import asyncio
import getpass
import sys
from pathlib import Path

import uvicorn

from command_interpreter import SessionEnded
from console_config import load_settings, setup_logging
from console_errors import ConsoleError
from console_shell import ConsoleShell
from console_web import create_app
from mount_watch import watch
from tree_navigator import join_path


def build_parser():
    parser = argparse.ArgumentParser(prog="consolectl", description="disk image console")
    parser.add_argument("--engine-url")
    parser.add_argument("--registry", help="path of the JSON disk registry")
    parser.add_argument("--log-level")
    sub = parser.add_subparsers(dest="cmd", required=True)

    # disks
    disks_p = sub.add_parser("disks")
    disks_sub = disks_p.add_subparsers(dest="disks_cmd", required=True)
    disks_sub.add_parser("list")
    add_p = disks_sub.add_parser("add")
    add_p.add_argument("path")
    folder_p = disks_sub.add_parser("add-folder")
    folder_p.add_argument("paths", nargs="+")
    disks_sub.add_parser("clear")

    # inspect
    inspect_p = sub.add_parser("inspect")
    inspect_p.add_argument("paths", nargs="+")
    inspect_p.add_argument("--encrypted", action="store_true")
    inspect_p.add_argument("--key", type=int, default=0)

    # partitions
    part_p = sub.add_parser("partitions")
    part_p.add_argument("disk")

    # tree
    tree_p = sub.add_parser("tree")
    tree_p.add_argument("disk")
    tree_p.add_argument("partition")
    tree_p.add_argument("--path", default="/")

    # exec
    exec_p = sub.add_parser("exec")
    exec_p.add_argument("script", nargs="?", default="")
    exec_p.add_argument("--file")

    # session
    login_p = sub.add_parser("login")
    login_p.add_argument("--id", dest="user_id", required=True)
    login_p.add_argument("--user", required=True)
    login_p.add_argument("--password")
    sub.add_parser("logout")
    sub.add_parser("users")

    watch_p = sub.add_parser("watch")
    watch_p.add_argument("--interval", type=float, default=3.0)

    serve_p = sub.add_parser("serve")
    serve_p.add_argument("--host", default="127.0.0.1")
    serve_p.add_argument("--port", type=int, default=8000)
    return parser


def print_tree(node, indent=""):
    for child in node.children or ():
        print(f"{indent}{child.name}{'/' if child.is_folder else ''}")
        if child.is_folder:
            print_tree(child, indent + "  ")


async def run(args, shell: ConsoleShell):
    if args.cmd == "disks":
        registry = shell.registry
        if args.disks_cmd == "list":
            for disk in registry.entries:
                print(f"{disk.display_name} = {disk.file_path}")
        elif args.disks_cmd == "add":
            ok, message = registry.add_disk(args.path)
            print(message)
            return 0 if ok else 1
        elif args.disks_cmd == "add-folder":
            added = registry.add_disks_from_folder(args.paths)
            print(f"Added {len(added)} disk(s)")
        elif args.disks_cmd == "clear":
            registry.clear_disks()
            print("Cleared")

    elif args.cmd == "inspect":
        if len(args.paths) == 1:
            report = await shell.client.read_disk(path=args.paths[0], is_encrypted=args.encrypted, key=args.key)
        else:
            report = await shell.client.read_disk(paths=args.paths, is_encrypted=args.encrypted, key=args.key)
        print(report.model_dump_json(by_alias=True, indent=2))

    elif args.cmd == "partitions":
        fetcher = shell.fetcher
        if not await fetcher.fetch_partitions(args.disk):
            print(f"Error: {fetcher.error}", file=sys.stderr)
            return 1
        for p in fetcher.partitions:
            print(f"{p.name}\t{p.size}\t{p.type}\t{p.fit}\t{p.start}\t{p.status}")

    elif args.cmd == "tree":
        nav = shell.navigator
        if not await nav.fetch_partition_tree(args.disk, args.partition):
            print(f"Error: {nav.error}", file=sys.stderr)
            return 1
        wanted = [s for s in args.path.split("/") if s]
        nav.go_to(wanted)
        print(join_path(nav.path))
        print_tree(nav.current_directory(), "  ")

    elif args.cmd == "exec":
        script = Path(args.file).read_text(encoding="utf-8") if args.file else args.script
        result = await shell.execute(script)
        print(result.text)
        if isinstance(result, SessionEnded):
            print("Session closed")

    elif args.cmd == "login":
        mounted, message = await shell.gate.check_mount()
        if not mounted:
            print(f"Error: {message}", file=sys.stderr)
            return 1
        password = args.password or getpass.getpass("Password: ")
        ok, message = await shell.gate.login(args.user, password, args.user_id)
        print(message if ok else f"Login failed: {message}")
        return 0 if ok else 1

    elif args.cmd == "logout":
        result = await shell.logout()
        print(result.text)

    elif args.cmd == "users":
        listing = await shell.refresh_users_groups()
        print("Users: " + ", ".join(listing.users))
        print("Groups: " + ", ".join(listing.groups))

    elif args.cmd == "watch":
        await watch(shell, interval=args.interval)

    return 0


def serve(settings, host, port):
    shell = ConsoleShell.from_settings(settings)
    uvicorn.run(create_app(shell), host=host, port=port, log_level=settings.log_level.lower())
    return 0


async def _main(args, settings):
    shell = ConsoleShell.from_settings(settings)
    try:
        return await run(args, shell)
    finally:
        await shell.aclose()


def main(argv=None):
    args = build_parser().parse_args(argv)
    settings = load_settings(
        engine_url=args.engine_url, registry_path=args.registry, log_level=args.log_level
    )
    setup_logging(settings.log_level)

    if args.cmd == "serve":
        return serve(settings, args.host, args.port)
    try:
        return asyncio.run(_main(args, settings))
    except ConsoleError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
