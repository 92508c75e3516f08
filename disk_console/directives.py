"""Builders for the administrative directives understood by the engine.

Each directive is a flat ``name -flag=value`` string; values are not checked
beyond being present, the engine does the real validation.
"""

from console_errors import ValidationError

SESSION_END_DIRECTIVE = "logout"


def _require(**fields):
    missing = [name for name, value in fields.items() if not str(value or "").strip()]
    if missing:
        raise ValidationError(f"Please fill in every field: {', '.join(missing)}")


def directive_names(script: str):
    """First token of every non-blank line, lower-cased."""
    return [line.split()[0].lower() for line in script.splitlines() if line.strip()]


def mkusr(user, password, group):
    _require(user=user, password=password, group=group)
    return f"mkusr -user={user} -pass={password} -grp={group}"


def rmusr(user):
    _require(user=user)
    return f"rmusr -user={user}"


def mkgrp(name):
    _require(name=name)
    return f"mkgrp -name={name}"


def rmgrp(name):
    _require(name=name)
    return f"rmgrp -name={name}"


def chgrp(user, group):
    _require(user=user, group=group)
    return f"chgrp -user={user} -grp={group}"


def cat(path):
    _require(path=path)
    return f'cat -file1="{path}"'


def logout():
    return SESSION_END_DIRECTIVE
