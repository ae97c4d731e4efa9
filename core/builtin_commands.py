"""
Shell-like built-ins: help, clear, login, pwd, cd, ls, cat, whoami, …

Every handler is total – bad input becomes a one-line diagnostic.
"""
from core.commands import CommandContext, command
from core.events import AlertEvent, ClearEvent, CloseEvent
from core.paths import is_within, resolve
from core.session import AuthState
from core.virtual_fs import DOCS_DIR
from config.settings import FAKE_UNAME


# Readable only as root (the path itself and anything beneath it)
RESTRICTED_READ = {"/secrets"}

HELP_GROUPS = (
    ("core",  "Commands"),
    ("linux", "Linux-ish"),
    ("map",   "Map link"),
    ("eggs",  "Eggs"),
)


# ── System ────────────────────────────────────────────────────────────────────

@command("help", description="Show available commands")
def _help(ctx: CommandContext):
    for group, label in HELP_GROUPS:
        usages = [c.usage for c in ctx.registry.visible() if c.group == group]
        if usages:
            ctx.write(f"{label}: " + ", ".join(usages))


@command("clear", aliases=("cls",), description="Clear terminal screen")
def _clear(ctx: CommandContext):
    ctx.emit(ClearEvent())


@command("close", aliases=("exit",), description="Close terminal")
def _close(ctx: CommandContext):
    ctx.write("Session closed.")
    ctx.emit(CloseEvent())


@command("login", description="Login to admin account")
def _login(ctx: CommandContext):
    if ctx.session.is_root:
        ctx.write("Already logged in as admin.")
        return
    ctx.session.auth_state = AuthState.AWAITING_PASSWORD
    ctx.write("Password:")


# ── Linux-ish ─────────────────────────────────────────────────────────────────

@command("pwd", group="linux", description="Print working directory")
def _pwd(ctx: CommandContext):
    ctx.write(ctx.session.cwd)


@command("cd", usage="cd <dir>", group="linux", description="Change directory")
def _cd(ctx: CommandContext):
    target = ctx.args[0] if ctx.args else "/"
    new = ctx.resolve(target)
    if ctx.vfs.is_directory(new):
        ctx.session.cwd = new
    elif ctx.vfs.exists(new):
        ctx.write(f"cd: not a directory: {target}")
    else:
        ctx.write(f"cd: no such file or directory: {target}")


@command("ls", usage="ls [dir]", group="linux", description="List directory contents")
def _ls(ctx: CommandContext):
    target = ctx.args[0] if ctx.args else "."
    entries = ctx.vfs.list_directory(ctx.resolve(target))
    if entries is not None:
        if entries:
            ctx.write("  ".join(entries))
    elif ctx.vfs.exists(ctx.resolve(target)):
        ctx.write(f"ls: cannot access '{target}': Not a directory")
    else:
        ctx.write(f"ls: cannot access '{target}': No such file or directory")


@command("cat", usage="cat <file>", min_args=1, group="linux",
         description="Display file contents")
def _cat(ctx: CommandContext):
    arg = ctx.args[0]
    path = ctx.resolve(arg)
    # bare names not found here fall back to /docs
    if not ctx.vfs.exists(path) and "/" not in arg:
        path = resolve(DOCS_DIR, arg)

    if not ctx.session.is_root and any(is_within(path, r) for r in RESTRICTED_READ):
        ctx.write(f"cat: {arg}: Permission denied")
        return

    content = ctx.vfs.read_file(path)
    if content is not None:
        ctx.write(*(content.splitlines() or [""]))
    elif ctx.vfs.is_directory(path):
        ctx.write(f"cat: {arg}: Is a directory")
    else:
        ctx.write(f"cat: {arg}: No such file")


@command("whoami", group="linux", description="Print current user")
def _whoami(ctx: CommandContext):
    ctx.write(ctx.session.username)


@command("uname", usage="uname -a", group="linux", description="System information")
def _uname(ctx: CommandContext):
    ctx.write(FAKE_UNAME if ctx.args[:1] == ["-a"] else "Linux")


@command("date", group="linux", description="Display current date and time")
def _date(ctx: CommandContext):
    ctx.write(ctx.clock())


@command("echo", usage="echo <txt>", group="linux", description="Display text")
def _echo(ctx: CommandContext):
    ctx.write(" ".join(ctx.args))


@command("man", usage="man <cmd>", min_args=1, group="linux",
         description="Display manual pages")
def _man(ctx: CommandContext):
    ctx.write("No manual entry. This is not a real shell.")


@command("sudo", usage="sudo su", group="linux", description="Execute as superuser")
def _sudo(ctx: CommandContext):
    if ctx.args[:1] and ctx.args[0].lower() == "su":
        ctx.write("sudo: Authentication failure")
        ctx.emit(AlertEvent(ctx.profile.alert_duration_ms))
    else:
        ctx.write("sudo: permission denied")
