# Tests for the async service facade, the command line and the server controller.

import threading

import pytest

from helpers import write_tree
from rootshare.core.config import ConfigManager
from rootshare.core.exceptions import ServerError
from rootshare.core.result import ErrorKind
from rootshare.core.server_controller import ServerController
from rootshare.main import build_parser


class TestFileService:
    @pytest.mark.asyncio
    async def test_browse(self, service, root):
        write_tree(root, {"a/b.txt": b"b"})

        listing = (await service.browse("a")).value

        assert listing.current_path == "a"
        assert [item.relative_path for item in listing.items] == ["a/b.txt"]

    @pytest.mark.asyncio
    async def test_browse_root_by_default(self, service, root):
        assert (await service.browse(None)).value.current_path == ""

    @pytest.mark.asyncio
    async def test_search_wraps_results(self, service, root):
        write_tree(root, {"x/report.txt": b"r"})

        found = (await service.search("REPORT")).value

        assert found.query == "REPORT"
        assert [item.name for item in found.results] == ["report.txt"]

    @pytest.mark.asyncio
    async def test_mutation_round(self, service, root):
        assert (await service.create_folder("", "work")).ok
        write_tree(root, {"work/a.txt": b"a"})

        assert (await service.copy("work/a.txt", "work/a.txt")).value.destination == "work/a-Copy.txt"
        assert (await service.move("work/a-Copy.txt", "b.txt")).ok
        assert (await service.delete("work")).ok

        assert sorted(p.name for p in root.iterdir()) == ["b.txt"]

    @pytest.mark.asyncio
    async def test_errors_are_values(self, service):
        assert (await service.delete("ghost")).kind is ErrorKind.NOT_FOUND
        assert (await service.open_download("../x")).kind is ErrorKind.INVALID_PATH
        assert (await service.build_archive([])).kind is ErrorKind.INVALID_PATH


class TestCommandLine:
    def test_defaults_are_unset(self):
        args = build_parser().parse_args([])

        assert args.root is None
        assert args.port is None
        assert not args.no_file_log

    def test_flags(self):
        args = build_parser().parse_args(
            ["--root", "/srv/share", "--port", "9000", "--host", "0.0.0.0", "--log-level", "debug", "--no-file-log"]
        )

        assert args.root == "/srv/share"
        assert args.port == 9000
        assert args.host == "0.0.0.0"
        assert args.log_level == "debug"
        assert args.no_file_log


class TestServerController:
    def test_lifecycle_without_binding_a_port(self, tmp_path, config, monkeypatch):
        settings = ConfigManager(tmp_path / "config.json").build_settings(root_path=str(config.root), server_port=8765)
        controller = ServerController(settings, config)
        release = threading.Event()
        monkeypatch.setattr(controller, "_run_api_server", lambda: release.wait(5))

        controller.start()
        assert controller.status == "running"
        assert controller.get_web_ui_url() == "http://127.0.0.1:8765/ui/"
        with pytest.raises(ServerError):
            controller.start()

        release.set()
        controller.stop()
        assert controller.status == "stopped"
        assert controller.api_thread is None
