import asyncio

from src.bot.handler import ACQUISITION_FAILED_TEXT, StickerBot
from src.chat.base import ChatMessage
from src.pipeline.models import GlobalSettings
from src.pipeline.runner import PipelineDispatcher
from src.pipeline.steps.acquire import MediaAcquirer
from src.pipeline.steps.deliver import StickerDelivery
from src.pipeline.steps.image_chain import ImageTransformChain
from src.pipeline.steps.video_chain import VideoTransformChain
from src.storage.settings_store import InMemorySettingsStore

from conftest import FakeChatSession, FakeRemover, make_image_asset


def _bot(session: FakeChatSession, store: InMemorySettingsStore | None = None) -> StickerBot:
    store = store or InMemorySettingsStore()
    dispatcher = PipelineDispatcher(
        session=session,
        settings_store=store,
        image_chain=ImageTransformChain(FakeRemover()),
        video_chain=VideoTransformChain(),
        delivery=StickerDelivery(),
    )
    return StickerBot(session, store, MediaAcquirer(session, retry_delay=0), dispatcher)


async def test_acquisition_failure_replies_and_sends_nothing(session: FakeChatSession) -> None:
    message = ChatMessage(id="m1", chat_id="c1", body="square", has_media=True)
    session.queue_download(message.id, RuntimeError("download failed"))

    result = await _bot(session).handle(message)

    assert result.status == "not_found"
    assert session.sent == []
    assert session.replies == [ACQUISITION_FAILED_TEXT]


async def test_keyword_gate_blocks_before_download(session: FakeChatSession) -> None:
    store = InMemorySettingsStore(GlobalSettings("Pack", "Me", require_caption=True))
    message = ChatMessage(id="m1", chat_id="c1", body="square", has_media=True)

    result = await _bot(session, store).handle(message)

    assert result.status == "skipped"
    assert session.download_calls == []
    assert session.sent == []


async def test_keyword_gate_allows_sticker_caption(session: FakeChatSession) -> None:
    store = InMemorySettingsStore(GlobalSettings("Pack", "Me", require_caption=True))
    message = ChatMessage(id="m1", chat_id="c1", body="sticker", has_media=True)
    session.queue_download(message.id, make_image_asset(20, 20))

    result = await _bot(session, store).handle(message)

    assert result.delivered
    assert session.sent[0]["pack"] == "Pack"


async def test_text_without_media_is_ignored(session: FakeChatSession) -> None:
    result = await _bot(session).handle(ChatMessage(id="m1", chat_id="c1", body="square"))

    assert result is None
    assert session.download_calls == []


async def test_name_and_author_commands(session: FakeChatSession) -> None:
    store = InMemorySettingsStore()
    bot = _bot(session, store)

    await bot.handle(ChatMessage(id="m1", chat_id="c1", body="name  Cool Pack "))
    await bot.handle(ChatMessage(id="m2", chat_id="c1", body="Author Sam"))

    credits = store.get_user_credits("c1")
    assert credits.pack_name == "Cool Pack"
    assert credits.author_name == "Sam"
    assert session.replies == [
        "✅ Sticker pack name saved: *Cool Pack*",
        "✅ Sticker author saved: *Sam*",
    ]


async def test_mode_command(session: FakeChatSession) -> None:
    store = InMemorySettingsStore()
    bot = _bot(session, store)

    await bot.handle(ChatMessage(id="m1", chat_id="c1", body="mode on"))
    await bot.handle(ChatMessage(id="m2", chat_id="c1", body="mode on"))
    await bot.handle(ChatMessage(id="m3", chat_id="c1", body="mode off"))

    assert store.get_global_settings().require_caption is False
    assert session.replies[0].startswith("✅ Bot mode saved")
    assert session.replies[1].startswith("ℹ️ Mode is already set")
    assert "Auto on any media" in session.replies[2]


async def test_welcome_lists_credits(session: FakeChatSession) -> None:
    await _bot(session).handle(ChatMessage(id="m1", chat_id="c1", body="Hello"))

    assert "My Pack" in session.replies[0]
    assert "Sticker Bot" in session.replies[0]


async def test_messages_run_as_independent_tasks(session: FakeChatSession) -> None:
    bot = _bot(session)
    bot.attach()
    first = ChatMessage(id="a", chat_id="c1", has_media=True)
    second = ChatMessage(id="b", chat_id="c2", has_media=True)
    session.queue_download("a", make_image_asset(30, 30))
    session.queue_download("b", make_image_asset(40, 40))

    await asyncio.gather(*(handler(msg) for handler in session.handlers for msg in (first, second)))
    await bot.wait_idle()

    assert sorted(record["target"] for record in session.sent) == ["c1", "c2"]
