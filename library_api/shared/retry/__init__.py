import importlib
import inspect
import pkgutil

__all__ = []

# Re-export every retry policy class defined in this package
for _, module_name, _ in pkgutil.iter_modules(__path__):
    module = importlib.import_module(f"{__name__}.{module_name}")
    for attr, value in vars(module).items():
        if inspect.isclass(value) and value.__module__ == module.__name__ and not attr.startswith("_"):
            globals()[attr] = value
            __all__.append(attr)
