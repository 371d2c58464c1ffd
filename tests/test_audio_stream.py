import asyncio

from ce_translator.audio import AudioChunkStream


def test_stream_delivers_chunks_until_closed() -> None:
    async def _run() -> tuple[list[bytes], int]:
        stream = AudioChunkStream()
        stream.push(b"one")
        stream.push(b"")
        stream.push(b"two")
        stream.close()
        stream.push(b"late")
        stream.close()
        return [chunk async for chunk in stream], stream.chunks_received

    chunks, received = asyncio.run(_run())
    assert chunks == [b"one", b"two"]
    assert received == 2


def test_stream_accepts_chunks_from_other_threads() -> None:
    async def _run() -> list[bytes]:
        stream = AudioChunkStream()

        def _producer() -> None:
            for index in range(3):
                stream.push(f"chunk-{index}".encode())

        await asyncio.to_thread(_producer)
        stream.close()
        return [chunk async for chunk in stream]

    assert asyncio.run(_run()) == [b"chunk-0", b"chunk-1", b"chunk-2"]
