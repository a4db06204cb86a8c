from importlib.machinery import SourceFileLoader
from importlib.util import spec_from_loader, module_from_spec
from pathlib import Path

from pbxgraft.config import Options
from pbxgraft.details.context import OptionsContext


def load_user_module(ctx: OptionsContext):
    module_name = ".".join(["pbxgraft", "workspace", ctx.MODULENAME])
    module_path = ctx.root.joinpath(ctx.FILENAME)
    if not module_path.is_file():
        raise FileNotFoundError(f"no {ctx.FILENAME} found in {ctx.root}")
    spec = spec_from_loader(
        module_name, SourceFileLoader(module_name, str(module_path))
    )
    if not spec or not spec.loader:
        raise RuntimeError(f"failed to load module spec {module_path}")
    config_module = module_from_spec(spec)
    setattr(config_module, "CTX", ctx)
    spec.loader.exec_module(config_module)


class Workspace:
    def __init__(self, workspace_root: Path = Path(".")):
        self.root = Path(workspace_root).resolve()
        # load workspace options
        options_context = OptionsContext(self.root)
        load_user_module(options_context)
        self.options = options_context.options

    def get_options(self, name: str) -> Options:
        if name not in self.options:
            known = ", ".join(sorted(self.options)) or "none"
            raise ValueError(f"unknown options '{name}' (known: {known})")
        return self.options[name]
