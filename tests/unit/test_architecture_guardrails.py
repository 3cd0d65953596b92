import ast
import sys
from pathlib import Path
import unittest

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

PACKAGE_ROOT = Path(__file__).resolve().parents[2] / "src" / "jam"

# Layer -> jam top-level areas it may import from.
ALLOWED_LAYER_IMPORTS = {
    "domain": {"domain"},
    "application": {"domain", "application"},
    "infrastructure": {"domain", "infrastructure"},
    "presentation": {"domain", "presentation"},
}

RULE_MODULES = (
    "career_rules",
    "release_scorer",
    "venue_economy",
    "gig_economy",
    "training_service",
    "dice_service",
    "season_calendar",
    "compatibility",
)

# Roots a rule module must never touch: clocks, storage, console, env.
RULE_FORBIDDEN_ROOTS = {"time", "os", "threading", "sqlalchemy", "rich", "dotenv", "random", "logging"}


def _imported_names(path: Path) -> set[str]:
    tree = ast.parse(path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            names.update(alias.name for alias in node.names)
        elif isinstance(node, ast.ImportFrom) and node.module and node.level == 0:
            names.add(node.module)
    return names


def _jam_area(module: str) -> str | None:
    parts = module.split(".")
    if parts[0] != "jam" or len(parts) < 2:
        return None
    return parts[1]


def _layer_files(layer: str) -> list[Path]:
    return sorted((PACKAGE_ROOT / layer).rglob("*.py"))


class LayerImportTests(unittest.TestCase):
    def test_each_layer_only_reaches_allowed_areas(self) -> None:
        violations: list[str] = []
        for layer, allowed in ALLOWED_LAYER_IMPORTS.items():
            for path in _layer_files(layer):
                for module in _imported_names(path):
                    area = _jam_area(module)
                    if area is not None and area not in allowed:
                        violations.append(f"{path.relative_to(PACKAGE_ROOT)} imports {module}")
        self.assertEqual([], sorted(violations))

    def test_only_wiring_modules_import_bootstrap(self) -> None:
        importers = [
            str(path.relative_to(PACKAGE_ROOT))
            for path in PACKAGE_ROOT.rglob("*.py")
            if "jam.bootstrap" in _imported_names(path)
        ]
        self.assertEqual(["__main__.py"], importers)

    def test_layers_ship_without_package_markers(self) -> None:
        self.assertEqual([], list(PACKAGE_ROOT.rglob("__init__.py")))


class RuleModulePurityTests(unittest.TestCase):
    def test_rule_modules_have_no_side_effecting_imports(self) -> None:
        services = PACKAGE_ROOT / "application" / "services"
        violations: dict[str, list[str]] = {}
        for name in RULE_MODULES:
            roots = {module.split(".")[0] for module in _imported_names(services / f"{name}.py")}
            bad = sorted(roots & RULE_FORBIDDEN_ROOTS)
            if bad:
                violations[name] = bad
        self.assertEqual({}, violations)

    def test_rule_modules_never_reach_the_service_or_its_collaborators(self) -> None:
        stateful = {
            "jam.application.services.career_service",
            "jam.application.services.scheduler",
            "jam.application.services.event_bus",
            "jam.application.services.save_migrator",
            "jam.domain.repositories",
        }
        services = PACKAGE_ROOT / "application" / "services"
        for name in RULE_MODULES:
            with self.subTest(module=name):
                self.assertEqual(set(), _imported_names(services / f"{name}.py") & stateful)


if __name__ == "__main__":
    unittest.main()
