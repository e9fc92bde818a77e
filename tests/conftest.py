"""Shared fixtures for packing tests."""

import json
import os
import shutil

import pytest

from common.process import CommandError
from compilation.models import Chunk, CompileResult, ModuleDescriptor
from packer.materialize import split_resolved_dependency


class FakeNpmClient:
    """Stand-in for NpmClient that manipulates node_modules directories directly."""

    def __init__(self, graph=None, install_error=None, prune_failures=()):
        self.graph = graph if graph is not None else {}
        self.install_error = install_error
        self.prune_failures = set(prune_failures)
        self.calls = []

    def list_dependency_graph(self, cwd):
        self.calls.append(("ls", cwd))
        return self.graph

    def install(self, packages, cwd):
        self.calls.append(("install", list(packages), cwd))
        if self.install_error is not None:
            raise self.install_error
        dependencies = {}
        for entry in packages:
            name, version = split_resolved_dependency(entry)
            target = os.path.join(cwd, "node_modules", name)
            os.makedirs(target, exist_ok=True)
            with open(os.path.join(target, "package.json"), "w", encoding="utf-8") as f:
                json.dump({"name": name, "version": version}, f)
            dependencies[name] = version
        with open(os.path.join(cwd, "package.json"), "w", encoding="utf-8") as f:
            json.dump({"dependencies": dependencies}, f)

    def prune(self, cwd):
        self.calls.append(("prune", cwd))
        if cwd in self.prune_failures:
            raise CommandError(["npm", "prune"], 1, "prune exploded")
        with open(os.path.join(cwd, "package.json"), "r", encoding="utf-8") as f:
            wanted = set(json.load(f)["dependencies"])
        modules_dir = os.path.join(cwd, "node_modules")
        for entry in os.listdir(modules_dir):
            if entry.startswith("@"):
                scope_dir = os.path.join(modules_dir, entry)
                for scoped in os.listdir(scope_dir):
                    if f"{entry}/{scoped}" not in wanted:
                        shutil.rmtree(os.path.join(scope_dir, scoped))
                if not os.listdir(scope_dir):
                    os.rmdir(scope_dir)
            elif entry not in wanted:
                shutil.rmtree(os.path.join(modules_dir, entry))


def external(request, issuer=None):
    """Descriptor of an external module as the bundler reports it."""
    return ModuleDescriptor(identifier=f'external "{request}"', raw_request=request, issuer=issuer)


def internal(path, raw_request, issuer=None):
    """Descriptor of a bundled module."""
    return ModuleDescriptor(identifier=path, raw_request=raw_request, issuer=issuer)


def single_chunk(output_path, modules):
    """CompileResult with every module in one chunk."""
    return CompileResult(output_path=str(output_path), chunks=[Chunk(name="main", modules=list(modules))])


@pytest.fixture
def fake_npm():
    return FakeNpmClient


@pytest.fixture
def modules():
    """Namespace of descriptor builders."""
    class _Builders:
        pass

    builders = _Builders()
    builders.external = external
    builders.internal = internal
    builders.single_chunk = single_chunk
    return builders


@pytest.fixture
def write_json():
    def _write(path, data):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data), encoding="utf-8")
        return str(path)
    return _write
