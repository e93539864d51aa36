# graph/graph.py
from langgraph.graph import StateGraph, END
from graph.state import DailyRoutineState


def route_after_refresh(state: DailyRoutineState) -> str:
    if not state["auto_clock_in"]:
        return "end"
    return "calendar_check"


def route_after_calendar_check(state: DailyRoutineState) -> str:
    if state["is_holiday"]:
        return "end"
    return "time_gate"


def route_after_time_gate(state: DailyRoutineState) -> str:
    if state["action_taken"] == "skipped":
        return "end"
    return "stamp"


def build_graph(
    clock_service=None,
    calendar_service=None,
    settings=None,
):
    """日次ルーチン（再取得→休日判定→時刻判定→自動出勤）のグラフを構築して返す

    各ノード関数はサービス依存を持つため、functools.partialでラップして
    LangGraphが期待する (state) -> dict シグネチャに合わせる。
    """
    from functools import partial
    from graph.nodes.refresh_node import refresh_node
    from graph.nodes.calendar_check_node import calendar_check_node
    from graph.nodes.time_gate_node import time_gate_node
    from graph.nodes.stamp_node import stamp_node

    refresh_wrapped = partial(refresh_node, clock_service=clock_service)
    calendar_check_wrapped = partial(
        calendar_check_node, calendar_service=calendar_service
    )
    time_gate_wrapped = partial(time_gate_node, settings=settings)
    stamp_wrapped = partial(stamp_node, clock_service=clock_service)

    workflow = StateGraph(DailyRoutineState)

    workflow.add_node("refresh", refresh_wrapped)
    workflow.add_node("calendar_check", calendar_check_wrapped)
    workflow.add_node("time_gate", time_gate_wrapped)
    workflow.add_node("stamp", stamp_wrapped)

    workflow.set_entry_point("refresh")

    workflow.add_conditional_edges(
        "refresh",
        route_after_refresh,
        {"calendar_check": "calendar_check", "end": END},
    )
    workflow.add_conditional_edges(
        "calendar_check",
        route_after_calendar_check,
        {"time_gate": "time_gate", "end": END},
    )
    workflow.add_conditional_edges(
        "time_gate",
        route_after_time_gate,
        {"stamp": "stamp", "end": END},
    )

    workflow.add_edge("stamp", END)

    return workflow.compile()


class DailyRoutine:
    """グラフを起動時・日付変更時に実行する"""

    def __init__(self, graph):
        self._graph = graph

    async def run(self, trigger: str) -> DailyRoutineState:
        from graph.state import make_initial_state

        return await self._graph.ainvoke(make_initial_state(trigger))
