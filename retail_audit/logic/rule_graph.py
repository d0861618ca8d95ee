"""Publish-time consistency checks over a template's conditional rules.

Builds the source -> target graph of question dependencies and reports
cycles and references to questions or sections that do not exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from retail_audit.models.template import ActionType, Template


@dataclass(frozen=True)
class DanglingReference:
    rule_id: str
    question_id: str
    field: str
    missing_id: str


@dataclass
class RuleGraphReport:
    cycles: List[List[str]] = field(default_factory=list)
    dangling: List[DanglingReference] = field(default_factory=list)
    unruled_conditionals: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.cycles

    def warnings(self) -> List[Dict[str, str]]:
        out: List[Dict[str, str]] = [
            {
                "code": "dangling_reference",
                "rule_id": d.rule_id,
                "question_id": d.question_id,
                "field": d.field,
                "missing_id": d.missing_id,
            }
            for d in self.dangling
        ]
        out.extend(
            {"code": "conditional_without_rules", "question_id": qid}
            for qid in self.unruled_conditionals
        )
        return out


def build_dependency_graph(template: Template) -> Dict[str, List[str]]:
    """Return adjacency lists: source question -> dependent question ids.

    A rule adds an edge from its source to the question that owns it (the
    gated question) and, when it targets a question, to that target as well.
    Only questions present in the template become nodes.
    """
    graph: Dict[str, List[str]] = {q.question_id: [] for q in template.iter_questions()}
    for question in template.iter_questions():
        for rule in question.conditional_rules:
            source = rule.source_question_id
            if source not in graph:
                continue
            targets = []
            if question.is_conditional:
                targets.append(question.question_id)
            if rule.action.type != ActionType.SKIP_TO_SECTION and rule.action.target_question_id in graph:
                targets.append(rule.action.target_question_id)
            for target in targets:
                if target not in graph[source]:
                    graph[source].append(target)
    return graph


def find_cycles(graph: Dict[str, List[str]]) -> List[List[str]]:
    """Depth-first search returning one path per back edge found.

    Each cycle is reported as the node sequence closing on its first node,
    e.g. ``["q1", "q2", "q1"]``.
    """
    white, grey, black = 0, 1, 2
    colour = {node: white for node in graph}
    cycles: List[List[str]] = []

    for root in graph:
        if colour[root] != white:
            continue
        path: List[str] = [root]
        stack = [(root, iter(graph[root]))]
        colour[root] = grey
        while stack:
            node, children = stack[-1]
            nxt: Optional[str] = next(children, None)
            if nxt is None:
                colour[node] = black
                stack.pop()
                path.pop()
                continue
            if colour.get(nxt, black) == grey:
                start = path.index(nxt)
                cycles.append(path[start:] + [nxt])
            elif colour.get(nxt) == white:
                colour[nxt] = grey
                path.append(nxt)
                stack.append((nxt, iter(graph[nxt])))
    return cycles


def check_rule_graph(template: Template) -> RuleGraphReport:
    report = RuleGraphReport()
    for question in template.iter_questions():
        if question.is_conditional and not question.conditional_rules:
            report.unruled_conditionals.append(question.question_id)
        for rule in question.conditional_rules:
            if not template.has_question(rule.source_question_id):
                report.dangling.append(
                    DanglingReference(rule.id, question.question_id, "source_question_id", rule.source_question_id)
                )
            target_q = rule.action.target_question_id
            if target_q and not template.has_question(target_q):
                report.dangling.append(
                    DanglingReference(rule.id, question.question_id, "target_question_id", target_q)
                )
            target_s = rule.action.target_section_id
            if target_s and not template.has_section(target_s):
                report.dangling.append(
                    DanglingReference(rule.id, question.question_id, "target_section_id", target_s)
                )
    report.cycles = find_cycles(build_dependency_graph(template))
    return report


__all__ = [
    "DanglingReference",
    "RuleGraphReport",
    "build_dependency_graph",
    "find_cycles",
    "check_rule_graph",
]
