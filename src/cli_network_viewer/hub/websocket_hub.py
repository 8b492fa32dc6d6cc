"""
WebSocket 中转服务

在本地回环地址上接受连接。每个连接发来的文本帧会转发给其他所有连接（不回显给发送方），
普通连接的帧同时交给接入回调解析。保留路径（默认 /inner）上的连接是控制端，
它的帧只转发、不解析，也不计入客户端数量。
"""

import asyncio
import itertools
from dataclasses import dataclass, field
from typing import Callable

import websockets
from loguru import logger
from websockets.asyncio.server import Server, ServerConnection
from websockets.exceptions import ConnectionClosed

from .. import config

FrameSink = Callable[[str], None]
PeersChanged = Callable[[int], None]


@dataclass
class Peer:
    """一个已连接的 WebSocket 端点"""

    id: int
    address: str
    path: str
    inner: bool
    outbound: asyncio.Queue = field(default_factory=asyncio.Queue)


class WebSocketHub:
    """
    WebSocket 中转服务

    Args:
        host: 监听地址
        port: 监听端口，0 表示由系统分配
        inner_path: 控制端使用的保留路径
        on_frame: 普通连接收到文本帧时调用
        on_peers_changed: 普通连接数量变化时调用
    """

    def __init__(
        self,
        host: str = config.DEFAULT_HOST,
        port: int = config.DEFAULT_PORT,
        inner_path: str = config.INNER_PATH,
        on_frame: FrameSink | None = None,
        on_peers_changed: PeersChanged | None = None,
    ):
        self.host = host
        self.port = port
        self.inner_path = inner_path
        self.on_frame = on_frame
        self.on_peers_changed = on_peers_changed

        self._server: Server | None = None
        self._peers: dict[int, Peer] = {}
        self._lock = asyncio.Lock()
        self._tasks: set[asyncio.Task] = set()
        self._ids = itertools.count(1)

    # ============== 生命周期 ==============

    @property
    def is_open(self) -> bool:
        return self._server is not None

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @property
    def peer_count(self) -> int:
        """普通连接数量（不含控制端）"""
        return sum(1 for peer in self._peers.values() if not peer.inner)

    async def start(self) -> None:
        """
        开始监听，已经在监听时不做任何事

        Raises:
            OSError: 地址无法绑定
        """
        if self._server is not None:
            return

        self._server = await websockets.serve(self._handle_connection, self.host, self.port)

        # 端口为 0 时取系统实际分配的端口
        sockets = list(self._server.sockets)
        if sockets:
            self.port = sockets[0].getsockname()[1]

        logger.info(f"WebSocket 服务已启动: ws://{self.address}")

    async def stop(self) -> None:
        """停止监听并断开所有连接，可重复调用"""
        server = self._server
        if server is None:
            return
        self._server = None

        # 关闭所有连接，等待连接处理协程退出
        server.close()
        await server.wait_closed()

        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()

        async with self._lock:
            self._peers.clear()

        logger.info("WebSocket 服务已停止")

    # ============== 连接处理 ==============

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle_connection(self, connection: ServerConnection) -> None:
        path = connection.request.path if connection.request is not None else "/"
        remote = connection.remote_address
        address = f"{remote[0]}:{remote[1]}" if remote else "unknown"

        peer = Peer(
            id=next(self._ids),
            address=address,
            path=path,
            inner=path == self.inner_path,
        )
        await self._register(peer)

        writer = asyncio.create_task(self._write_loop(peer, connection))
        self._track(writer)

        try:
            async for message in connection:
                # 只处理文本帧
                if not isinstance(message, str):
                    continue

                await self._fanout(peer, message)

                if not peer.inner and self.on_frame is not None:
                    self.on_frame(message)
        except ConnectionClosed:
            logger.debug(f"连接关闭: {peer.address}")
        except OSError as e:
            logger.warning(f"连接异常 {peer.address}: {e}")
        finally:
            writer.cancel()
            await self._unregister(peer)

    async def _write_loop(self, peer: Peer, connection: ServerConnection) -> None:
        """把 peer 的出站队列依次写入连接，写失败只影响这一个连接"""
        while True:
            message = await peer.outbound.get()
            try:
                await connection.send(message)
            except ConnectionClosed:
                return
            except OSError as e:
                logger.warning(f"发送失败 {peer.address}: {e}")
                return

    async def _fanout(self, sender: Peer, message: str) -> None:
        """转发给除发送方以外的所有连接"""
        async with self._lock:
            targets = [peer for peer in self._peers.values() if peer.id != sender.id]

        for peer in targets:
            peer.outbound.put_nowait(message)

    # ============== 连接表 ==============

    async def _register(self, peer: Peer) -> None:
        async with self._lock:
            self._peers[peer.id] = peer
            count = self.peer_count

        kind = "控制端" if peer.inner else "客户端"
        logger.info(f"{kind}已连接: {peer.address} {peer.path}")

        if not peer.inner:
            self._notify_peers_changed(count)

    async def _unregister(self, peer: Peer) -> None:
        async with self._lock:
            removed = self._peers.pop(peer.id, None)
            count = self.peer_count

        if removed is None:
            return

        logger.info(f"连接已断开: {peer.address}")

        if not peer.inner:
            self._notify_peers_changed(count)

    def _notify_peers_changed(self, count: int) -> None:
        if self.on_peers_changed is not None:
            self.on_peers_changed(count)
