import argparse
import asyncio
import uuid
from pathlib import Path

from .bot.handler import StickerBot
from .chat.base import ChatMessage, ChatSession
from .chat.local import LocalChatSession
from .config import Settings, get_settings
from .pipeline.runner import PipelineFactory
from .pipeline.steps.acquire import MediaAcquirer
from .storage.settings_store import JsonSettingsStore


def build_bot(settings: Settings, session: ChatSession, data_dir: Path) -> StickerBot:
    store = JsonSettingsStore(
        data_dir,
        default_pack=settings.default_pack,
        default_author=settings.default_author,
    )
    dispatcher = PipelineFactory(settings).create(session, store)
    bot = StickerBot(
        session=session,
        settings_store=store,
        acquirer=MediaAcquirer(session, retry_delay=settings.acquire_retry_delay),
        dispatcher=dispatcher,
    )
    bot.attach()
    return bot


async def _run(args: argparse.Namespace) -> int:
    settings = get_settings()
    session = LocalChatSession(Path(args.output_dir))
    bot = build_bot(settings, session, Path(args.data_dir or settings.data_dir))

    message = ChatMessage(id=uuid.uuid4().hex, chat_id=args.sender, body=args.caption)
    if args.input:
        session.attach(message, Path(args.input))

    await session.emit(message)
    await bot.wait_idle()
    return 0 if session.sent or not args.input else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Sticker maker")
    parser.add_argument("--input", help="Image, GIF or video file to convert")
    parser.add_argument("--caption", default="", help='Caption, e.g. "square rbg" or "name MyPack"')
    parser.add_argument("--sender", default="local", help="Sender id used for pack/author credits")
    parser.add_argument("--output-dir", default="outputs", help="Where stickers are written")
    parser.add_argument("--data-dir", help="Settings directory (defaults to STICKER_DATA_DIR)")

    args = parser.parse_args()
    if not args.input and not args.caption:
        raise SystemExit("No input provided. Use --input or --caption.")

    code = asyncio.run(_run(args))
    if code == 0 and args.input:
        print(f"Done. Output: {args.output_dir}")
    raise SystemExit(code)


if __name__ == "__main__":
    main()
