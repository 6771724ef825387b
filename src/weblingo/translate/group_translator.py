from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from weblingo.apply.distribute import apply_text, split_proportionally
from weblingo.models import ContextGroup, GroupStats, TranslationUnit
from weblingo.translate.providers import TranslationProvider, try_translate

logger = logging.getLogger(__name__)


def join_group_text(texts: Sequence[str]) -> str:
    """Concatenate texts with one space wherever they would otherwise touch."""
    joined = ""
    for index, text in enumerate(texts):
        if index and not text[:1].isspace() and not joined[-1:].isspace():
            joined += " "
        joined += text
    return joined.strip()


@dataclass(slots=True)
class _GroupPlan:
    """Per-node translations for one group; None keeps the original text."""

    texts: list[str | None]
    grouped: bool
    errors: list[str]


class GroupTranslator:
    def __init__(
        self,
        provider: TranslationProvider,
        *,
        pause_ms: int = 50,
        workers: int = 1,
        sleep_fn: Callable[[float], None] = time.sleep,
    ) -> None:
        self._provider = provider
        self._pause_s = max(pause_ms, 0) / 1000
        self._workers = max(workers, 1)
        self._sleep = sleep_fn

    def translate_groups(
        self,
        groups: Sequence[ContextGroup],
        *,
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None = None,
    ) -> GroupStats:
        """Translate every group and write the results into its nodes.

        Provider calls may run on worker threads, but the tree is only
        touched here, group by group in document order.
        """
        stats = GroupStats(groups=len(groups), nodes=sum(len(group.nodes) for group in groups))
        if not groups:
            return stats
        logger.info("Translating %d nodes in %d context groups", stats.nodes, stats.groups)

        def plan(group: ContextGroup) -> _GroupPlan:
            return self._plan_group(group, source_lang, target_lang, glossary_id)

        if self._workers > 1 and len(groups) > 1:
            with ThreadPoolExecutor(max_workers=min(self._workers, len(groups))) as executor:
                plans = list(executor.map(plan, groups))
        else:
            plans = [plan(group) for group in groups]

        for number, (group, group_plan) in enumerate(zip(groups, plans), start=1):
            self._apply_plan(number, group, group_plan, stats)

        logger.info(
            "Group translation finished: %d grouped, %d fell back, %d nodes untranslated",
            stats.grouped_ok,
            stats.fallback_groups,
            stats.failed_nodes,
        )
        return stats

    def _plan_group(
        self,
        group: ContextGroup,
        source_lang: str | None,
        target_lang: str,
        glossary_id: str | None,
    ) -> _GroupPlan:
        originals = [node.original for node in group.nodes]
        unit_text = join_group_text(originals)
        try:
            outcome = try_translate(
                self._provider,
                TranslationUnit(
                    source_lang=source_lang,
                    target_lang=target_lang,
                    texts=(unit_text,),
                    glossary_id=glossary_id,
                ),
            )
            if outcome.ok:
                return _GroupPlan(
                    texts=list(split_proportionally(originals, unit_text, outcome.text)),
                    grouped=True,
                    errors=[],
                )

            errors = [f"group:{outcome.error}"]
            texts: list[str | None] = []
            for original in originals:
                single = try_translate(
                    self._provider,
                    TranslationUnit(
                        source_lang=source_lang,
                        target_lang=target_lang,
                        texts=(original,),
                        glossary_id=glossary_id,
                    ),
                )
                if single.ok:
                    texts.append(single.text.strip())
                else:
                    texts.append(None)
                    errors.append(f"node:{single.error}")
            return _GroupPlan(texts=texts, grouped=False, errors=errors)
        finally:
            if self._pause_s:
                self._sleep(self._pause_s)

    def _apply_plan(
        self, number: int, group: ContextGroup, plan: _GroupPlan, stats: GroupStats
    ) -> None:
        if plan.grouped:
            stats.grouped_ok += 1
        else:
            stats.fallback_groups += 1
            logger.warning(
                "Context group %d failed (%s); translated its %d nodes one by one",
                number,
                plan.errors[0] if plan.errors else "unknown",
                len(group.nodes),
            )

        for node, translated in zip(group.nodes, plan.texts):
            if translated is None:
                stats.failed_nodes += 1
                logger.warning("Node left untranslated: %.50r", node.original)
                stats.failures.append({"text": node.original[:80], "reason": "node_translation_failed"})
                continue
            apply_text(node, translated)
            if not plan.grouped:
                stats.fallback_nodes_ok += 1
        logger.debug("Context group %d done (%d nodes)", number, len(group.nodes))
