"""Run source code through the external compile provider."""

from __future__ import annotations

from typing import List, Optional

from runbot.datatypes.catalog_datatypes import Compiler, CompilerSpec
from runbot.datatypes.compile_datatypes import Code, CompileProvider, CompileRequest, CompileResult
from runbot.datatypes.discord_datatypes import ChannelID, GuildID
from runbot.errors import CompileProviderError, NoCompilerSpecified, RunbotError
from runbot.resolution.resolution_engine import ResolutionEngine
from runbot.util.logger import get_logger

logger = get_logger("run_actions")


async def run(
    engine: ResolutionEngine,
    guild_id: GuildID,
    channel_id: ChannelID,
    provider: CompileProvider,
    spec: Optional[CompilerSpec],
    code: Code,
    options: Optional[List[str]] = None,
    stdin: Optional[str] = None,
    save: bool = False,
) -> CompileResult:
    """Run ``code`` for an explicit command.

    An explicit spec wins over the language of the code block.
    """
    if spec is not None:
        compiler = await engine.resolve_spec(guild_id, channel_id, spec)
    elif code.language is not None:
        compiler = await engine.resolve_language_name(guild_id, channel_id, code.language)
    else:
        raise NoCompilerSpecified()

    return await _compile(provider, compiler, code, options or [], stdin, save)


async def run_implicit(
    engine: ResolutionEngine,
    guild_id: GuildID,
    channel_id: ChannelID,
    provider: CompileProvider,
    code: Code,
    stdin: Optional[str] = None,
) -> Optional[CompileResult]:
    """Run a code block posted without a command.

    Returns None when auto-run is off for the channel.
    """
    if not await engine.get_auto(guild_id, channel_id):
        return None

    save = await engine.get_auto_save(guild_id, channel_id)

    if code.language is None:
        raise NoCompilerSpecified()
    compiler = await engine.resolve_language_name(guild_id, channel_id, code.language)

    return await _compile(provider, compiler, code, [], stdin, save)


async def _compile(
    provider: CompileProvider,
    compiler: Compiler,
    code: Code,
    options: List[str],
    stdin: Optional[str],
    save: bool,
) -> CompileResult:
    request = CompileRequest(
        compiler=compiler.wandbox_name,
        code=code.text,
        options=list(options),
        stdin=stdin,
        save=save,
    )
    logger.debug("[RUN] Compiling with %s (save=%s)", compiler.wandbox_name, save)
    try:
        return await provider.compile(request)
    except RunbotError:
        raise
    except Exception as exc:
        raise CompileProviderError(str(exc)) from exc
