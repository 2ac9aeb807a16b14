"""Invoke tasks for environment sync, builds, tests, and linting.

Every task shells out to the `uv` CLI so local runs match CI.
"""

from __future__ import annotations

import shlex
import shutil
from collections.abc import Sequence
from pathlib import Path

from invoke import Collection, Context, task

PROJECT_ROOT = Path(__file__).parent
DIST_DIR = PROJECT_ROOT / "dist"
SOURCES = ("src", "tests")


def _uv(ctx: Context, *args: str, echo: bool = True) -> None:
    """Run ``uv`` with the given arguments under a PTY.

    Args:
        ctx: Invoke execution context.
        *args: Arguments appended after the `uv` executable.
        echo: Whether to echo the command before running it.
    """
    ctx.run(shlex.join(("uv", *args)), echo=echo, pty=True)


@task
def sync(ctx: Context, dev: bool = True) -> None:
    """Install the project into the uv environment.

    Args:
        ctx: Invoke execution context.
        dev: Include development extras (tests, linting, typing) when True.
    """
    _uv(ctx, "sync", *(("--extra", "dev") if dev else ()))


@task(help={"clean": "Remove existing artifacts from dist/ before building."})
def build(ctx: Context, clean: bool = False) -> None:
    """Build sdist and wheel into `dist/`.

    Args:
        ctx: Invoke execution context.
        clean: Delete prior artifacts in `dist/` before building.
    """
    if clean and DIST_DIR.exists():
        shutil.rmtree(DIST_DIR)
    _uv(ctx, "build")


@task(
    help={
        "k": "pytest -k expression for test selection.",
        "path": "Path or module to test (defaults to tests/).",
        "options": "Additional CLI flags forwarded verbatim to pytest.",
    }
)
def tests(ctx: Context, k: str = "", path: str = "tests", options: str = "") -> None:
    """Run the pytest suite.

    Args:
        ctx: Invoke execution context.
        k: Optional pytest ``-k`` expression.
        path: Test path or module to run.
        options: Extra pytest flags, split with shell quoting rules.
    """
    args: list[str] = ["run", "pytest"]
    if k:
        args.extend(["-k", k])
    if options:
        args.extend(shlex.split(options))
    args.append(path)
    _uv(ctx, *args)


@task(help={"fix": "Apply auto-fixes where possible (ruff --fix)."})
def lint(ctx: Context, fix: bool = False) -> None:
    """Check formatting and lint with Ruff.

    Args:
        ctx: Invoke execution context.
        fix: Pass ``--fix`` to ``ruff check``.
    """
    _uv(ctx, "run", "ruff", "format", "--check", *SOURCES)
    args: Sequence[str] = ("run", "ruff", "check", *SOURCES, *(("--fix",) if fix else ()))
    _uv(ctx, *args)


@task
def mypy(ctx: Context) -> None:
    """Type-check the package.

    Args:
        ctx: Invoke execution context.
    """
    _uv(ctx, "run", "mypy", "src")


@task
def ci(ctx: Context) -> None:
    """Run lint, type checks, and tests in CI order.

    Args:
        ctx: Invoke execution context.
    """
    ctx.invoke(lint)
    ctx.invoke(mypy)
    ctx.invoke(tests)


namespace = Collection(sync, build, tests, lint, mypy, ci)
