from contextlib import asynccontextmanager
from pathlib import Path
from urllib.parse import urlencode

from fastapi import FastAPI, Form, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from command_interpreter import SessionEnded
from console_errors import ConsoleError, GateClosedError
from console_shell import ConsoleShell

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=303)


def create_app(shell: ConsoleShell) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app):
        yield
        await shell.aclose()

    app = FastAPI(title="Disk Console", lifespan=lifespan)
    app.state.shell = shell

    def render(request: Request, name: str, **context):
        context.update(gate=shell.gate, notice=shell.take_notice())
        return templates.TemplateResponse(request, name, context)

    def browse_url():
        disk, partition = shell.navigator.selection or ("", "")
        return "/browse?" + urlencode({"disk": disk, "partition": partition})

    @app.exception_handler(ConsoleError)
    async def console_error(request: Request, exc: ConsoleError):
        shell.notify(str(exc), "error")
        if isinstance(exc, GateClosedError):
            return _redirect("/")
        return _redirect(request.headers.get("referer") or "/")

    # ---------- DISKS ----------
    @app.get("/")
    def index(request: Request):
        return render(request, "disks.html", registry=shell.registry)

    @app.post("/disks")
    def add_disk(file_path: str = Form("")):
        ok, message = shell.registry.add_disk(file_path.strip())
        shell.notify(message, "success" if ok else "error")
        return _redirect("/")

    @app.post("/disks/folder")
    def add_folder(paths: str = Form("")):
        added = shell.registry.add_disks_from_folder(p.strip() for p in paths.splitlines() if p.strip())
        shell.notify(f"{len(added)} disk(s) added", "success")
        return _redirect("/")

    # ---------- PARTITIONS ----------
    @app.get("/partitions")
    async def partitions(request: Request, disk: str):
        shell.gate.guard()
        await shell.fetcher.fetch_partitions(disk)
        return render(request, "partitions.html", disk=disk, fetcher=shell.fetcher)

    # ---------- TREE ----------
    @app.get("/browse")
    async def browse(request: Request, disk: str, partition: str):
        shell.gate.guard()
        nav = shell.navigator
        await nav.fetch_partition_tree(disk, partition)
        return render(
            request, "browse.html",
            disk=disk, partition=partition, nav=nav, directory=nav.current_directory(),
        )

    @app.post("/browse/folder")
    def open_folder(name: str = Form(...)):
        shell.gate.guard()
        ok, message = shell.navigator.open_folder(name)
        if not ok:
            shell.notify(message, "error")
        return _redirect(browse_url())

    @app.post("/browse/crumb")
    def open_crumb(index: int = Form(...)):
        shell.gate.guard()
        try:
            shell.navigator.open_breadcrumb(index)
        except IndexError:
            shell.navigator.current_directory()
        return _redirect(browse_url())

    @app.post("/browse/root")
    def open_root():
        shell.gate.guard()
        shell.navigator.open_root()
        return _redirect(browse_url())

    @app.post("/browse/file")
    async def open_file(name: str = Form(...)):
        shell.gate.guard()
        await shell.open_file(name)
        return _redirect(browse_url())

    # ---------- COMMANDS ----------
    @app.get("/console")
    def console(request: Request):
        return render(request, "console.html", interpreter=shell.interpreter, script="")

    @app.post("/console")
    async def run_console(request: Request, script: str = Form(""), action: str = Form("run")):
        if action == "clear":
            shell.interpreter.reset()
            shell.notify("Fields cleared", "info")
            return render(request, "console.html", interpreter=shell.interpreter, script="")
        try:
            result = await shell.execute(script)
        except ConsoleError as exc:
            shell.notify(f"Execution failed: {exc}", "error")
        else:
            if isinstance(result, SessionEnded):
                shell.notify("Session closed", "info")
            else:
                shell.notify("Execution completed", "success")
        return render(request, "console.html", interpreter=shell.interpreter, script=script)

    # ---------- SESSION ----------
    @app.get("/login")
    async def login_page(request: Request):
        mounted, message = await shell.gate.check_mount()
        if not mounted:
            shell.notify(message, "error")
        return render(request, "login.html")

    @app.post("/login")
    async def login(user_id: str = Form(""), username: str = Form(""), password: str = Form("")):
        ok, message = await shell.gate.login(username, password, user_id)
        shell.notify(message, "success" if ok else "error")
        return _redirect("/users" if ok else "/login")

    @app.post("/logout")
    async def logout():
        result = await shell.logout()
        shell.notify(result.text or "Session closed", "success")
        return _redirect("/")

    # ---------- USERS ----------
    @app.get("/users")
    async def users(request: Request):
        shell.gate.guard()
        try:
            await shell.refresh_users_groups()
        except ConsoleError as exc:
            shell.notify(str(exc), "error")
        return render(request, "users.html", users=shell.users, groups=shell.groups)

    @app.post("/users/create")
    async def create_user(user: str = Form(""), password: str = Form(""), group: str = Form("")):
        shell.gate.guard()
        await shell.create_user(user, password, group)
        return _redirect("/users")

    @app.post("/users/delete")
    async def delete_user(user: str = Form("")):
        shell.gate.guard()
        await shell.delete_user(user)
        return _redirect("/users")

    @app.post("/users/group")
    async def change_group(user: str = Form(""), group: str = Form("")):
        shell.gate.guard()
        await shell.change_group(user, group)
        return _redirect("/users")

    @app.post("/groups/create")
    async def create_group(name: str = Form("")):
        shell.gate.guard()
        await shell.create_group(name)
        return _redirect("/users")

    @app.post("/groups/delete")
    async def delete_group(name: str = Form("")):
        shell.gate.guard()
        await shell.delete_group(name)
        return _redirect("/users")

    return app
