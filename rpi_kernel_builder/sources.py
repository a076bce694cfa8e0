import shutil
from pathlib import Path

from rpi_kernel_builder.console import log_info, log_step, log_warn, run
from rpi_kernel_builder.errors import CommandError
from rpi_kernel_builder.settings import Repository, Settings


def source_dirs(settings: Settings) -> list[Path]:
    return [settings.aufs_source, settings.fw_source, settings.kern_source]

def sources_missing(settings: Settings) -> list[Path]:
    return [d for d in source_dirs(settings) if not d.is_dir()]

def reuse_existing(settings: Settings) -> bool:
    """Whether the existing trees are reused; falls back to cloning if any is absent."""
    if not settings.use_existing_src:
        return False
    missing = sources_missing(settings)
    if missing:
        log_warn("Some or all source trees are missing, setting USE_EXISTING_SRC=NO.")
        for d in missing:
            log_info(f"Missing: {d}")
        return False
    return True


# =========================
# FRESH CLONE
# =========================
def recreate_dir(path: Path) -> None:
    # rm -rf semantics: a symlink is removed, not followed
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.exists():
        shutil.rmtree(path)
    path.mkdir(parents=True)

def clone(repo: Repository, dest: Path, depth: int = 0) -> None:
    recreate_dir(dest)
    cmd = ["git", "clone", "--branch", repo.branch]
    if depth > 0:
        cmd += ["--depth", str(depth)]
    cmd += [repo.url, str(dest)]
    run(cmd, placeholder=f"Cloning {repo.url} ({repo.branch})", placeholder_column="Cloning...")

def sparse_clone(repo: Repository, dest: Path, subdir: str) -> None:
    recreate_dir(dest)
    run(["git", "init"], cwd=dest)
    run(["git", "config", "core.sparsecheckout", "true"], cwd=dest)
    sparse_file = dest / ".git/info/sparse-checkout"
    sparse_file.parent.mkdir(parents=True, exist_ok=True)
    with open(sparse_file, "a") as f:
        f.write(subdir + "\n")
    run(["git", "remote", "add", "-f", "origin", repo.url], cwd=dest,
        placeholder=f"Fetching {repo.url}", placeholder_column="Fetching...")
    run(["git", "pull", "origin", repo.branch], cwd=dest)

def clone_all(settings: Settings) -> None:
    log_step("Cloning source, grab some popcorn because this will take a bit...")
    log_info(f"Cloning AUFS source from {settings.aufs_repo.url}...")
    clone(settings.aufs_repo, settings.aufs_source, settings.clone_depth)
    log_info(f"Sparse-cloning RPI firmware from {settings.fw_repo.url}...")
    sparse_clone(settings.fw_repo, settings.fw_source, settings.fw_subdir)
    log_info(f"Cloning RPI Linux kernel source from {settings.kern_repo.url}...")
    clone(settings.kern_repo, settings.kern_source, settings.clone_depth)


# =========================
# UPDATE IN PLACE
# =========================
def update(name: str, repo: Repository, path: Path, pull_branch: bool = False) -> bool:
    log_info(f"Attempting to update {name}...")
    pull = ["git", "pull", "origin"] + ([repo.branch] if pull_branch else [])
    try:
        run(pull, cwd=path)
        run(["git", "checkout", f"origin/{repo.branch}"], cwd=path)
    except CommandError as e:
        log_warn(f"Could not update {name}, using existing source: {e}")
        return False
    return True

def update_all(settings: Settings) -> None:
    update("AUFS sources", settings.aufs_repo, settings.aufs_source)
    update("RPI firmware", settings.fw_repo, settings.fw_source, pull_branch=True)
    update("RPI Linux kernel sources", settings.kern_repo, settings.kern_source)


def acquire_sources(settings: Settings) -> None:
    if not reuse_existing(settings):
        clone_all(settings)
    elif settings.update_existing:
        update_all(settings)
    else:
        log_info("Using existing source trees as-is")
