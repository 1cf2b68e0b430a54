"""
concierge/cli.py

Command-line chat interface for the reservation engine.
- Reads guest input line by line
- Runs each line through Engine.process (optionally asking the LLM when nothing matched)
- Prints the reply plus any structured action, and appends both to a transcript file

Environment:
- LOG_LEVEL: logging level for the engine (default WARNING)
- LLM_FALLBACK: set to 1/true to ask the remote model when the engine finds no intent
"""

import logging
import os
from datetime import datetime, timezone

from concierge.config import Settings
from concierge.dialogue import TurnStatus
from concierge.engine import Engine
from concierge.llm.client import classify_with_llm
from concierge.prompts import render
from concierge.session import ConversationSession

logger = logging.getLogger(__name__)


def _transcript_path():
    """transcripts/session-<utc stamp>.txt under the working directory, or None if it can't be created."""
    try:
        transcripts_dir = os.path.join(os.getcwd(), "transcripts")
        os.makedirs(transcripts_dir, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
        return os.path.join(transcripts_dir, f"session-{stamp}.txt")
    except OSError as err:
        logger.warning("transcripts disabled: %s", err)
        return None


def _append_transcript(path, user, reply):
    if not path:
        return
    try:
        with open(path, "a", encoding="utf-8") as f:
            f.write(f"You: {user}\n")
            f.write(f"Assistant: {reply}\n")
    except OSError as err:
        logger.warning("could not write transcript %s: %s", path, err)


def run_turn(engine: Engine, sess: ConversationSession, user: str):
    """One guest line through the engine, with the LLM fallback when enabled."""
    result = engine.process(sess, user)
    if result.status is TurnStatus.NO_INTENT_MATCH and engine.settings.llm_fallback:
        guess = classify_with_llm(user, sess.step.value,
                                  history=sess.recent_history(engine.settings.history_turns))
        if guess:
            result = engine.advance_with_external(sess, guess[0], guess[1])
    return result


def main():
    """Run the interactive CLI loop."""
    settings = Settings.from_env()
    logging.basicConfig(level=getattr(logging, settings.log_level, logging.WARNING),
                        format="%(levelname)s %(name)s: %(message)s")
    engine = Engine(settings)
    sess = ConversationSession(language=settings.default_language)
    transcript_path = _transcript_path()

    print("Lagunacreek Concierge (type 'exit' to quit)\n")
    print(f"Assistant: {render('language_prompt', sess.language)}\n")
    while True:
        try:
            raw = input("You: ")
        except EOFError:
            print()
            break
        # Sanitize pasted scripts: remove repeated "You:" tokens and excess whitespace
        user = raw.replace("You:", "").replace("you:", "").replace("YOU:", "").strip()
        if not user:
            continue
        if user.lower() in {"exit", "quit"}:
            print("Bye!")
            break

        result = run_turn(engine, sess, user)
        print(f"Assistant: {result.response}\n")
        if result.action is not None:
            print(f"  [{result.action.type}] {result.action.payload}\n")
        _append_transcript(transcript_path, user, result.response)


if __name__ == "__main__":
    main()
