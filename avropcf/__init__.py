import importlib

mod = "avropcf"
class LazyLoader:
    """
    Lazy loader for the avropcf functions so importing the package stays cheap.
    """
    def __init__(self, mappings):
        self._modules = {}
        self._mappings = mappings

    def _load_module(self, module_name):
        if module_name not in self._modules:
            self._modules[module_name] = importlib.import_module(module_name)
        return self._modules[module_name]

    def __getattr__(self, item):
        if item in self._mappings:
            module_name, attr_name = self._mappings[item]
            module = self._load_module(module_name)
            return getattr(module, attr_name)
        else:
            return self._load_module(f"{mod}.{item}")

# Define the public names and their corresponding module paths
_mappings = {
    "to_parsing_canonical_form": (f"{mod}.pcf", "to_parsing_canonical_form"),
    "transform_to_pcf": (f"{mod}.pcf", "transform_to_pcf"),
    "parse_schema_text": (f"{mod}.pcf", "parse_schema_text"),
    "canonicalize": (f"{mod}.pcf", "canonicalize"),
    "Context": (f"{mod}.pcf", "Context"),
    "PCFError": (f"{mod}.pcf", "PCFError"),
    "InvalidSchemaTypeError": (f"{mod}.pcf", "InvalidSchemaTypeError"),
    "InvalidSizeValueError": (f"{mod}.pcf", "InvalidSizeValueError"),
    "MaxDepthExceededError": (f"{mod}.pcf", "MaxDepthExceededError"),
    "fingerprint": (f"{mod}.fingerprint", "fingerprint"),
    "fingerprint64": (f"{mod}.fingerprint", "fingerprint64"),
    "fingerprint_rabin": (f"{mod}.fingerprint", "fingerprint_rabin"),
    "fingerprint_sha256": (f"{mod}.fingerprint", "fingerprint_sha256"),
    "fingerprint_md5": (f"{mod}.fingerprint", "fingerprint_md5"),
    "pcf_schema": (f"{mod}.fingerprint", "pcf_schema"),
    "avsc_to_pcf": (f"{mod}.fingerprint", "avsc_to_pcf"),
    "avsc_to_fingerprint": (f"{mod}.fingerprint", "avsc_to_fingerprint"),
}

_lazy_loader = LazyLoader(_mappings)

def __getattr__(name):
    return getattr(_lazy_loader, name)
