"""Tests for SandboxLifecycle and stream demultiplexing."""

import pytest
from fakes import FakeRuntime, frame

from chatshell.errors import SandboxError, SandboxStage, SandboxTimeoutError
from chatshell.sandbox.lifecycle import HEADER_SIZE, SandboxLifecycle, SandboxState, demultiplex
from chatshell.sandbox.models import SandboxConfig
from chatshell.sandbox.runtime import SandboxRuntime


class TestDemultiplex:
    def test_single_frame(self) -> None:
        assert demultiplex(frame("hello")) == (b"hello", False)

    def test_multiple_frames_joined(self) -> None:
        raw = frame("a") + frame("b", stream=2) + frame("c")
        assert demultiplex(raw) == (b"abc", True)

    def test_unframed_stream_drops_first_eight_bytes(self) -> None:
        assert demultiplex(b"XXXXXXXXpayload") == (b"payload", False)

    def test_short_stream(self) -> None:
        assert demultiplex(b"abc") == (b"", False)

    def test_empty_stream(self) -> None:
        assert demultiplex(b"") == (b"", False)

    def test_truncated_frame_keeps_partial_payload(self) -> None:
        raw = frame("abcdef")[:-2]
        assert demultiplex(raw) == (b"abcd", False)

    def test_partial_trailing_header_dropped(self) -> None:
        raw = frame("aaaaa") + frame("bbbbb") + frame("ccccc")[:2]
        assert demultiplex(raw) == (b"aaaaabbbbb", False)


class TestLifecycle:
    def test_fake_runtime_satisfies_protocol(self) -> None:
        assert isinstance(FakeRuntime(), SandboxRuntime)

    async def test_success_walks_all_states(self) -> None:
        runtime = FakeRuntime([frame("out")])
        lifecycle = SandboxLifecycle(runtime)

        result = await lifecycle.run("ls")

        assert result.raw_output == b"out"
        assert result.exited_with_error is False
        assert result.truncated is False
        assert runtime.calls == ["create", "start", "exec", "stop", "remove"]
        assert lifecycle.state is SandboxState.TORN_DOWN

    async def test_uses_configured_image_user_and_template(self) -> None:
        runtime = FakeRuntime([frame("")])
        config = SandboxConfig(image="custom/nu:1", user="bot", exec_template=["nu", "--no-config-file", "-c", "{command}"])

        await SandboxLifecycle(runtime, config).run("ls; ps")

        assert (runtime.image, runtime.user) == ("custom/nu:1", "bot")
        assert runtime.argv == ["nu", "--no-config-file", "-c", "ls; ps"]

    async def test_chunks_joined_before_demultiplexing(self) -> None:
        data = frame("hello world")
        runtime = FakeRuntime([data[:5], data[5:12], data[12:]])

        result = await SandboxLifecycle(runtime).run("echo")

        assert result.raw_output == b"hello world"

    async def test_stderr_frame_flags_error(self) -> None:
        runtime = FakeRuntime([frame("oops", stream=2)])
        result = await SandboxLifecycle(runtime).run("x")
        assert result.exited_with_error is True

    @pytest.mark.parametrize(
        ("step", "stage"),
        [("create", SandboxStage.CREATE), ("start", SandboxStage.START), ("exec", SandboxStage.EXEC)],
    )
    async def test_step_failure_maps_to_stage(self, step: str, stage: SandboxStage) -> None:
        runtime = FakeRuntime([frame("x")], fail_on=step)
        lifecycle = SandboxLifecycle(runtime)

        with pytest.raises(SandboxError) as info:
            await lifecycle.run("ls")

        assert info.value.stage is stage
        assert f"{step} exploded" in info.value.detail
        assert lifecycle.state is SandboxState.TORN_DOWN

    async def test_no_teardown_calls_when_create_fails(self) -> None:
        runtime = FakeRuntime(fail_on="create")
        with pytest.raises(SandboxError):
            await SandboxLifecycle(runtime).run("ls")
        assert runtime.teardown_calls == []

    @pytest.mark.parametrize("step", ["start", "exec"])
    async def test_teardown_after_failure(self, step: str) -> None:
        runtime = FakeRuntime(fail_on=step)
        with pytest.raises(SandboxError):
            await SandboxLifecycle(runtime).run("ls")
        assert runtime.teardown_calls == ["stop", "remove"]

    @pytest.mark.parametrize("step", ["stop", "remove"])
    async def test_teardown_failure_swallowed(self, step: str) -> None:
        runtime = FakeRuntime([frame("fine")], fail_on=step)

        result = await SandboxLifecycle(runtime).run("ls")

        assert result.raw_output == b"fine"
        # remove is still attempted after a failed stop
        assert runtime.teardown_calls == ["stop", "remove"]

    async def test_timeout(self) -> None:
        runtime = FakeRuntime([frame("late")], delay=5)
        lifecycle = SandboxLifecycle(runtime, SandboxConfig(timeout=0.05))

        with pytest.raises(SandboxTimeoutError) as info:
            await lifecycle.run("sleep 10sec")

        assert info.value.stage is SandboxStage.TIMEOUT
        assert runtime.teardown_calls == ["stop", "remove"]

    async def test_output_truncated_at_limit(self) -> None:
        runtime = FakeRuntime([frame("a" * 64), frame("b" * 64), frame("c" * 64)])
        lifecycle = SandboxLifecycle(runtime, SandboxConfig(max_output_bytes=80))

        result = await lifecycle.run("big")

        assert result.truncated is True
        assert len(result.raw_output) <= 80
        assert result.raw_output.startswith(b"a" * 64)

    async def test_cap_inside_frame_header(self) -> None:
        runtime = FakeRuntime([frame("aaaaa"), frame("bbbbb"), frame("ccccc")])
        lifecycle = SandboxLifecycle(runtime, SandboxConfig(max_output_bytes=20))

        result = await lifecycle.run("small frames")

        assert result.truncated is True
        assert result.raw_output == b"aaaaabbbbb"

    async def test_single_use(self) -> None:
        lifecycle = SandboxLifecycle(FakeRuntime([frame("x")]))
        await lifecycle.run("ls")
        with pytest.raises(RuntimeError, match="single command"):
            await lifecycle.run("ls")

    async def test_handle_recorded(self) -> None:
        lifecycle = SandboxLifecycle(FakeRuntime([frame("x")]))
        assert lifecycle.handle is None
        await lifecycle.run("ls")
        assert lifecycle.handle == "c0ffee0123456789"

    def test_header_size(self) -> None:
        assert HEADER_SIZE == 8
