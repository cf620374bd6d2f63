from __future__ import annotations

"""Keyboard dispatcher for one outline buffer.

The controller owns the focus mode of the buffer: every key press is mapped
to a command through the :class:`Keymap`, then routed through a dispatch
table selected by the current selection kind (``none``, ``title``, ``text``
or ``block``). Handlers ask the services for a target, mutate through the
edit engine and write the resulting selection back through the selection
service so that targets are always visible.

Mutating commands are wrapped in :meth:`OutlineController._recorded_edit`,
which takes an undo checkpoint before the edit and a snapshot after it when
the edit succeeded. Folding, navigation and zoom are not recorded on their
own; the next checkpoint picks them up.

No UI toolkit code lives here. Scrolling, rendering and the OS clipboard are
left to the caller, which reads them from the returned :class:`KeyResult`.
"""

from dataclasses import dataclass, replace
import logging
from typing import Any, Callable, Dict, List, Optional

from outline_toolkit.config import ConfigManager
from outline_toolkit.core.models import (
    BlockSelection,
    OutlineContext,
    Selection,
    TextSelection,
    TitleSelection,
)
from outline_toolkit.core.services import (
    ClipboardService,
    FoldService,
    NavigationService,
    OperationResult,
    SelectionService,
    StructureEditingService,
    UndoService,
)
from outline_toolkit.ui.controllers.keymap import KeyEvent, Keymap

__all__ = ["KeyResult", "OutlineController"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeyResult:
    """Outcome of one dispatched command.

    Attributes
    ----------
    handled
        False when no command is bound to the key or the command does not
        apply in the current mode; the caller may then let the key through.
    command
        The command the key was mapped to.
    result
        Edit-engine result for structural commands.
    clipboard_text
        Text to place on the OS clipboard (copy and cut).
    scroll_to_top
        The view should scroll to its top (ArrowUp on the first block).
    """
    handled: bool
    command: Optional[str] = None
    result: Optional[OperationResult] = None
    clipboard_text: Optional[str] = None
    scroll_to_top: bool = False


Handler = Callable[[KeyEvent], KeyResult]


class OutlineController:
    """Route keyboard commands to the outline services.

    Parameters
    ----------
    context : OutlineContext
        The session the buffer belongs to.
    editing_service : StructureEditingService
        Structural edit engine.
    undo_service : UndoService
        Snapshot history.
    selection_service : SelectionService
        Selection writes with auto-expand.
    navigation_service : NavigationService
        Directional focus targets.
    fold_service : FoldService
        Fold flags of the buffer.
    clipboard_service : ClipboardService
        Producer of clipboard text.
    keymap : Keymap, optional
        Key bindings; loaded from :class:`ConfigManager` when omitted.
    scroll_to_top_on_first : bool, default=True
        Report ``scroll_to_top`` for ArrowUp on the first block.
    """

    def __init__(
        self,
        context: OutlineContext,
        editing_service: StructureEditingService,
        undo_service: UndoService,
        selection_service: SelectionService,
        navigation_service: NavigationService,
        fold_service: FoldService,
        clipboard_service: ClipboardService,
        keymap: Optional[Keymap] = None,
        scroll_to_top_on_first: bool = True,
    ) -> None:
        self.context: OutlineContext = context
        self.editing_service = editing_service
        self.undo_service = undo_service
        self.selection_service = selection_service
        self.navigation_service = navigation_service
        self.fold_service = fold_service
        self.clipboard_service = clipboard_service
        self.keymap: Keymap = keymap or Keymap.from_config()
        self.scroll_to_top_on_first = scroll_to_top_on_first
        self._modes: Dict[str, Dict[str, Handler]] = self._build_dispatch_tables()

    @classmethod
    def from_config(cls, context: OutlineContext, config: Optional[ConfigManager] = None) -> "OutlineController":
        """Wire a controller with services configured from ``editor.yml`` and ``keymap.yml``."""
        config = config or ConfigManager()
        editor = config.get_editor_settings()
        undo_cfg = editor.get("undo") or {}
        clipboard_cfg = editor.get("clipboard") or {}
        navigation_cfg = editor.get("navigation") or {}
        fold = FoldService()
        return cls(
            context,
            editing_service=StructureEditingService(fold),
            undo_service=UndoService(max_history=undo_cfg.get("max_history", 50)),
            selection_service=SelectionService(fold),
            navigation_service=NavigationService(fold),
            fold_service=fold,
            clipboard_service=ClipboardService(clipboard_cfg.get("separator")),
            keymap=Keymap.from_config(config.get_keymap()),
            scroll_to_top_on_first=bool(navigation_cfg.get("scroll_to_top_on_first", True)),
        )

    # ---------------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------------

    def handle_key(self, event: KeyEvent) -> KeyResult:
        """Map *event* to a command and execute it in the current mode."""
        command = self.keymap.command_for(event)
        logger.debug("Key: %s mode=%s -> %s", event.combo, self.context.selection.kind, command)
        if command is None:
            return KeyResult(False)
        return self.execute(command, event)

    def execute(self, command: str, event: Optional[KeyEvent] = None) -> KeyResult:
        """Run *command* as if its key had been pressed."""
        handler = self._modes[self.context.selection.kind].get(command)
        if handler is None:
            return KeyResult(False, command)
        return replace(handler(event or KeyEvent("")), command=command)

    def type_text(self, text: str) -> KeyResult:
        """Replace the current title or block text range with *text*."""
        if self.context.selection.kind not in ("title", "text"):
            return KeyResult(False, "type_text")
        return replace(self._replace_text(text), command="type_text")

    def can_undo(self) -> bool:
        return self.undo_service.can_undo()

    def can_redo(self) -> bool:
        return self.undo_service.can_redo()

    def undo(self) -> bool:
        return self.undo_service.undo(self.context)

    def redo(self) -> bool:
        return self.undo_service.redo(self.context)

    # ---------------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------------

    def _build_dispatch_tables(self) -> Dict[str, Dict[str, Handler]]:
        shared: Dict[str, Handler] = {
            "undo": self._undo,
            "redo": self._redo,
        }
        none: Dict[str, Handler] = {
            "navigate_up": lambda event: self._seed_selection("up"),
            "navigate_left": lambda event: self._seed_selection("up"),
            "navigate_down": lambda event: self._seed_selection("down"),
            "navigate_right": lambda event: self._seed_selection("down"),
            "enter": self._activate_buffer,
            "space": self._activate_buffer,
            "select_all": self._select_all_top_level,
            "escape": lambda event: self._handled(),
        }
        title: Dict[str, Handler] = {
            "navigate_up": lambda event: self._select_and_handle(self.navigation_service.title_up(
                self.context, self.context.selection, event.caret_x, event.on_first_line)),
            "navigate_down": lambda event: self._select_and_handle(self.navigation_service.title_down(
                self.context, self.context.selection, event.caret_x, event.on_last_line)),
            "navigate_left": lambda event: self._select_and_handle(
                self.navigation_service.title_left(self.context, self.context.selection)),
            "navigate_right": lambda event: self._select_and_handle(
                self.navigation_service.title_right(self.context, self.context.selection)),
            "extend_left": lambda event: self._extend_title(-1),
            "extend_right": lambda event: self._extend_title(1),
            "collapse": lambda event: self._fold_top_level("collapse_one_level"),
            "expand": lambda event: self._fold_top_level("expand_one_level"),
            "collapse_all": lambda event: self._fold_top_level("collapse_all_levels"),
            "expand_all": lambda event: self._fold_top_level("expand_all_levels"),
            "drill_out": lambda event: self._handled(),
            "drill_in": self._drill_in_from_title,
            "enter": self._split_title,
            "space": lambda event: self._replace_text(" "),
            "backspace": self._backspace,
            "delete": self._delete_forward,
            "escape": self._clear_selection,
            "select_all": self._select_all_title,
            "zoom_out": self._zoom_out,
        }
        text: Dict[str, Handler] = {
            "navigate_up": lambda event: self._select_and_handle(self.navigation_service.text_up(
                self.context, self.context.selection, event.caret_x, event.on_first_line)),
            "navigate_down": lambda event: self._select_and_handle(self.navigation_service.text_down(
                self.context, self.context.selection, event.caret_x, event.on_last_line)),
            "navigate_left": lambda event: self._select_and_handle(
                self.navigation_service.text_left(self.context, self.context.selection)),
            "navigate_right": lambda event: self._select_and_handle(
                self.navigation_service.text_right(self.context, self.context.selection)),
            "extend_left": lambda event: self._select_and_handle(
                self.navigation_service.text_extend(self.context, self.context.selection, -1)),
            "extend_right": lambda event: self._select_and_handle(
                self.navigation_service.text_extend(self.context, self.context.selection, 1)),
            "extend_up": lambda event: self._extend_text_vertically(-1),
            "extend_down": lambda event: self._extend_text_vertically(1),
            "collapse": lambda event: self._fold_selected("collapse_one_level"),
            "expand": self._expand_or_create_child,
            "collapse_all": lambda event: self._fold_selected("collapse_all_levels"),
            "expand_all": lambda event: self._fold_selected("expand_all_levels"),
            "drill_out": self._drill_out,
            "drill_in": self._drill_in,
            "enter": self._split_block,
            "space": lambda event: self._replace_text(" "),
            "backspace": self._backspace,
            "delete": self._delete_forward,
            "escape": lambda event: self._select_and_handle(BlockSelection.single(self.context.selection.node_id)),
            "select_all": self._select_all_text,
            "zoom_in": self._zoom_in,
            "zoom_out": self._zoom_out,
        }
        block: Dict[str, Handler] = {
            "navigate_up": lambda event: self._step_blocks("up"),
            "navigate_down": lambda event: self._step_blocks("down"),
            "navigate_left": lambda event: self._select_and_handle(
                self.navigation_service.block_parent(self.context, self.context.selection)),
            "navigate_right": lambda event: self._select_and_handle(
                self.navigation_service.block_first_child(self.context, self.context.selection)),
            "extend_up": lambda event: self._select_and_handle(
                self.navigation_service.block_extend(self.context, self.context.selection, "up")),
            "extend_down": lambda event: self._select_and_handle(
                self.navigation_service.block_extend(self.context, self.context.selection, "down")),
            "extend_left": lambda event: self._handled(),
            "extend_right": lambda event: self._handled(),
            "collapse": lambda event: self._fold_selected("collapse_one_level"),
            "expand": self._expand_or_create_child,
            "collapse_all": lambda event: self._fold_selected("collapse_all_levels"),
            "expand_all": lambda event: self._fold_selected("expand_all_levels"),
            "drill_out": self._drill_out,
            "drill_in": self._drill_in,
            "enter": self._edit_focus_block,
            "space": self._create_sibling_from_block,
            "backspace": lambda event: self._delete_selected_blocks(),
            "delete": lambda event: self._delete_selected_blocks(),
            "escape": self._clear_selection,
            "select_all": lambda event: self._select_all_siblings(self.context.selection.focus),
            "zoom_in": self._zoom_in,
            "zoom_out": self._zoom_out,
        }
        # Structural commands behave the same for a caret and a block selection
        structural: Dict[str, Handler] = {
            "swap_up": lambda event: self._relocate(lambda ids: self.editing_service.swap(self.context, ids, "up")),
            "swap_down": lambda event: self._relocate(lambda ids: self.editing_service.swap(self.context, ids, "down")),
            "move_to_first": lambda event: self._relocate(
                lambda ids: self.editing_service.move_to_extreme(self.context, ids, "up")),
            "move_to_last": lambda event: self._relocate(
                lambda ids: self.editing_service.move_to_extreme(self.context, ids, "down")),
            "indent": lambda event: self._relocate(lambda ids: self.editing_service.indent(self.context, ids)),
            "outdent": lambda event: self._relocate(lambda ids: self.editing_service.outdent(self.context, ids)),
            "force_delete": lambda event: self._delete_selected_blocks(),
            "copy": lambda event: self._handled(clipboard_text=self._copy_selected()),
            "cut": self._cut,
        }
        text.update(structural)
        block.update(structural)
        return {
            "none": {**shared, **none},
            "title": {**shared, **title},
            "text": {**shared, **text},
            "block": {**shared, **block},
        }

    def _recorded_edit(self, mutate: Callable[[], Any]) -> Any:
        """Execute a mutating operation between undo checkpoints.

        - Refreshes the baseline snapshot before the mutation.
        - Executes the provided callable.
        - On success (OperationResult.success True or boolean True), pushes a post snapshot.
        - Returns the original result.
        """
        self.undo_service.checkpoint(self.context)
        result = mutate()
        if isinstance(result, bool):
            success = result
        else:
            success = bool(getattr(result, "success", False))
        if success:
            self.undo_service.push_snapshot(self.context)
        return result

    def _handled(self, **kwargs) -> KeyResult:
        return KeyResult(True, **kwargs)

    def _select(self, selection: Selection) -> Selection:
        return self.selection_service.set_selection(self.context, selection)

    def _clear_selection(self, event: KeyEvent) -> KeyResult:
        self.selection_service.clear(self.context)
        return self._handled()

    def _select_and_handle(self, selection: Optional[Selection]) -> KeyResult:
        """Apply a navigation target; None means the key does not move."""
        if selection is not None:
            self._select(selection)
        return self._handled()

    def _apply_target(self, result: OperationResult) -> OperationResult:
        if result.success and result.target is not None:
            self._select(result.target)
        return result

    def _edit(self, operation: Callable[[], OperationResult]) -> KeyResult:
        """Run an edit that reports its own focus target, recording it for undo."""
        result = self._recorded_edit(lambda: self._apply_target(operation()))
        return self._handled(result=result)

    def _selected_ids(self) -> List[str]:
        selection = self.context.selection
        if selection.kind == "text":
            return [selection.node_id]
        return list(selection.node_ids)

    def _focus_id(self) -> str:
        selection = self.context.selection
        return selection.node_id if selection.kind == "text" else selection.focus

    def _goal_column(self, selection, text: str, event: KeyEvent) -> int:
        if getattr(selection, "goal_x", None) is not None:
            return selection.goal_x
        if event.caret_x is not None:
            return event.caret_x
        offset = getattr(selection, "focus_offset", 0)
        return self.navigation_service.layout.column(text, offset)

    # --------------------------------------------------------------------- No selection

    def _seed_selection(self, direction: str) -> KeyResult:
        target = self.navigation_service.seed_block(self.context, direction)
        if target is None:
            self.selection_service.activate(self.context)
            return self._handled()
        return self._select_and_handle(target)

    def _activate_buffer(self, event: KeyEvent) -> KeyResult:
        """Enter/Space with nothing selected: reuse an empty last block or create one."""
        ctx = self.context
        last = ctx.tree.last_child(ctx.root_id)
        if last is not None and not ctx.texts.get_text(last):
            return self._select_and_handle(TextSelection.caret(last, 0))
        return self._edit(lambda: self.editing_service.append_block(ctx))

    def _select_all_top_level(self, event: KeyEvent) -> KeyResult:
        blocks = self.navigation_service.top_level_blocks(self.context)
        if not blocks:
            self.selection_service.activate(self.context)
            return self._handled()
        self.selection_service.select_blocks(self.context, blocks, anchor=blocks[0], focus=blocks[-1])
        return self._handled()

    # --------------------------------------------------------------------- Title

    def _extend_title(self, step: int) -> KeyResult:
        selection = self.context.selection
        length = self.context.texts.length(self.context.root_id)
        focus = max(0, min(selection.focus_offset + step, length))
        return self._select_and_handle(TitleSelection(selection.anchor_offset, focus))

    def _fold_top_level(self, operation: str) -> KeyResult:
        blocks = self.navigation_service.top_level_blocks(self.context)
        self.fold_service.apply_each(self.context, blocks, operation)
        return self._handled()

    def _drill_in_from_title(self, event: KeyEvent) -> KeyResult:
        ctx = self.context
        first = ctx.tree.first_child(ctx.root_id)
        if first is None:
            return self._edit(lambda: self.editing_service.create_first_child(ctx, ctx.root_id))
        goal_x = self._goal_column(ctx.selection, ctx.texts.get_text(ctx.root_id), event)
        offset = self.navigation_service.layout.offset_at_goal(ctx.texts.get_text(first), goal_x, "first")
        return self._select_and_handle(TextSelection.caret(first, offset, goal_x, "first"))

    def _split_title(self, event: KeyEvent) -> KeyResult:
        selection = self.context.selection
        return self._edit(lambda: self.editing_service.split_title(self.context, selection.start, selection.end))

    def _select_all_title(self, event: KeyEvent) -> KeyResult:
        length = self.context.texts.length(self.context.root_id)
        return self._select_and_handle(TitleSelection(0, length))

    # --------------------------------------------------------------------- Text editing

    def _replace_text(self, text: str, start: Optional[int] = None, end: Optional[int] = None) -> KeyResult:
        """Replace a range of the focused title/block text (the selection by default)."""
        ctx = self.context
        selection = ctx.selection
        in_title = selection.kind == "title"
        node_id = ctx.root_id if in_title else selection.node_id
        start = selection.start if start is None else start
        end = selection.end if end is None else end

        def _mutate() -> bool:
            caret = ctx.texts.replace_range(node_id, start, end, text)
            if in_title:
                self._select(TitleSelection.caret(caret))
            else:
                self._select(TextSelection.caret(node_id, caret))
            return True

        self._recorded_edit(_mutate)
        return self._handled()

    def _backspace(self, event: KeyEvent) -> KeyResult:
        selection = self.context.selection
        if not selection.is_collapsed:
            return self._replace_text("")
        if selection.focus_offset > 0:
            return self._replace_text("", selection.focus_offset - 1, selection.focus_offset)
        if selection.kind == "title":
            return self._handled()
        return self._edit(lambda: self.editing_service.merge_backward(self.context, selection.node_id))

    def _delete_forward(self, event: KeyEvent) -> KeyResult:
        selection = self.context.selection
        if not selection.is_collapsed:
            return self._replace_text("")
        node_id = self.context.root_id if selection.kind == "title" else selection.node_id
        if selection.focus_offset < self.context.texts.length(node_id):
            return self._replace_text("", selection.focus_offset, selection.focus_offset + 1)
        if selection.kind == "title":
            return self._handled()
        return self._edit(lambda: self.editing_service.merge_forward(self.context, selection.node_id))

    def _split_block(self, event: KeyEvent) -> KeyResult:
        selection = self.context.selection
        return self._edit(
            lambda: self.editing_service.split(self.context, selection.node_id, selection.start, selection.end)
        )

    def _extend_text_vertically(self, step: int) -> KeyResult:
        """Shift+ArrowUp/Down in a block: extend by a line, or switch to block mode at the boundary."""
        selection = self.context.selection
        text = self.context.texts.get_text(selection.node_id)
        head = selection.focus_offset
        if (step < 0 and head == 0) or (step > 0 and head == len(text)):
            return self._select_and_handle(BlockSelection.single(selection.node_id))
        layout = self.navigation_service.layout
        offset = layout.offset_on_adjacent_line(text, head, layout.column(text, head), step)
        if offset is None:
            offset = 0 if step < 0 else len(text)
        return self._select_and_handle(TextSelection(selection.node_id, selection.anchor_offset, offset))

    def _select_all_text(self, event: KeyEvent) -> KeyResult:
        selection = self.context.selection
        length = self.context.texts.length(selection.node_id)
        if selection.start > 0 or selection.end < length:
            return self._select_and_handle(TextSelection(selection.node_id, 0, length))
        return self._select_all_siblings(selection.node_id)

    # --------------------------------------------------------------------- Blocks

    def _select_all_siblings(self, node_id: str) -> KeyResult:
        siblings = self.context.tree.get_siblings(node_id)
        self.selection_service.select_blocks(self.context, siblings, anchor=siblings[0], focus=siblings[-1])
        return self._handled()

    def _step_blocks(self, direction: str) -> KeyResult:
        target = self.navigation_service.block_step(self.context, self.context.selection, direction)
        if target is None:
            return self._handled(scroll_to_top=direction == "up" and self.scroll_to_top_on_first)
        return self._select_and_handle(target)

    def _fold_selected(self, operation: str) -> KeyResult:
        self.fold_service.apply_each(self.context, self._selected_ids(), operation)
        return self._handled()

    def _expand_or_create_child(self, event: KeyEvent) -> KeyResult:
        """Mod+ArrowDown: expand one level, or give a childless block its first child."""
        ids = self._selected_ids()
        if len(ids) == 1 and not self.context.tree.has_children(ids[0]):
            in_block_mode = self.context.selection.kind == "block"

            def _create() -> OperationResult:
                result = self.editing_service.create_first_child(self.context, ids[0])
                if in_block_mode:
                    self._select(BlockSelection.single(result.details["created"]))
                else:
                    self._apply_target(result)
                return result

            return self._handled(result=self._recorded_edit(_create))
        return self._fold_selected("expand_one_level")

    def _drill_out(self, event: KeyEvent) -> KeyResult:
        """Collapse the parent and move to it; first-level blocks go to the title."""
        ctx = self.context
        selection = ctx.selection
        node_id = self._focus_id()
        parent = ctx.tree.find_parent(node_id)
        if parent is None or parent == ctx.root_id:
            self.selection_service.select_title(ctx)
            return self._handled()
        self.fold_service.collapse_block(ctx, parent)
        if selection.kind == "block":
            return self._select_and_handle(BlockSelection.single(parent))
        goal_x = self._goal_column(selection, ctx.texts.get_text(node_id), event)
        offset = self.navigation_service.layout.offset_at_goal(ctx.texts.get_text(parent), goal_x, "first")
        return self._select_and_handle(TextSelection.caret(parent, offset, goal_x, "first"))

    def _drill_in(self, event: KeyEvent) -> KeyResult:
        """Move to the first child, creating one if the block has none."""
        ctx = self.context
        selection = ctx.selection
        node_id = self._focus_id()
        first = ctx.tree.first_child(node_id)
        if selection.kind == "block":
            if first is None:
                def _create() -> OperationResult:
                    result = self.editing_service.create_first_child(ctx, node_id)
                    self._select(BlockSelection.single(result.details["created"]))
                    return result

                return self._handled(result=self._recorded_edit(_create))
            return self._select_and_handle(BlockSelection.single(first))

        goal_x = self._goal_column(selection, ctx.texts.get_text(node_id), event)
        if first is None:
            def _create_text() -> OperationResult:
                result = self.editing_service.create_first_child(ctx, node_id)
                self._select(TextSelection.caret(result.details["created"], 0, goal_x, "first"))
                return result

            return self._handled(result=self._recorded_edit(_create_text))
        offset = self.navigation_service.layout.offset_at_goal(ctx.texts.get_text(first), goal_x, "first")
        return self._select_and_handle(TextSelection.caret(first, offset, goal_x, "first"))

    def _edit_focus_block(self, event: KeyEvent) -> KeyResult:
        focus = self.context.selection.focus
        return self._select_and_handle(TextSelection.caret(focus, self.context.texts.length(focus)))

    def _create_sibling_from_block(self, event: KeyEvent) -> KeyResult:
        focus = self.context.selection.focus
        return self._edit(lambda: self.editing_service.create_sibling_after(self.context, focus))

    def _relocate(self, operation: Callable[[List[str]], OperationResult]) -> KeyResult:
        """Run a relocation on the selected blocks and keep the selection on them."""
        selection = self.context.selection
        ids = self._selected_ids()

        def _mutate() -> OperationResult:
            result = operation(ids)
            if result.success:
                # re-selecting expands any parent the blocks moved under
                self._select(selection)
            return result

        return self._handled(result=self._recorded_edit(_mutate))

    def _delete_selected_blocks(self) -> KeyResult:
        """Delete the selected block(s) with descendants and move the focus nearby."""
        ctx = self.context
        in_block_mode = ctx.selection.kind == "block"
        ids = self._selected_ids()

        def _mutate() -> OperationResult:
            result = self.editing_service.delete_blocks(ctx, ids)
            if not result.success:
                return result
            focus = result.details["focus"]
            if focus is None:
                self.selection_service.select_title(ctx)
            elif in_block_mode:
                self._select(BlockSelection.single(focus))
            else:
                self._select(TextSelection.caret(focus, ctx.texts.length(focus)))
            return result

        return self._handled(result=self._recorded_edit(_mutate))

    def _copy_selected(self) -> str:
        return self.clipboard_service.copy_text(self.context, self._selected_ids())

    def _cut(self, event: KeyEvent) -> KeyResult:
        blob = self._copy_selected()
        return replace(self._delete_selected_blocks(), clipboard_text=blob)

    # --------------------------------------------------------------------- Zoom and history

    def _zoom_in(self, event: KeyEvent) -> KeyResult:
        node_id = self._focus_id()
        self.context.buffer.root_node_id = node_id
        logger.info("Zoom: in root=%s", node_id)
        self.selection_service.select_title(self.context)
        return self._handled()

    def _zoom_out(self, event: KeyEvent) -> KeyResult:
        """Show the parent of the buffer root, selecting where the focus was.

        A former focus hidden under a collapsed block is replaced by that
        block; nothing gets expanded.
        """
        ctx = self.context
        old_root = ctx.root_id
        parent = ctx.tree.find_parent(old_root)
        if parent is None:
            logger.info("Zoom noop: root=%s is a document root", old_root)
            return self._handled()
        former = self._focus_id() if ctx.selection.kind in ("text", "block") else old_root
        ctx.buffer.root_node_id = parent
        target = self.fold_service.hidden_by(ctx, former) or former
        logger.info("Zoom: out root=%s select=%s", parent, target)
        return self._select_and_handle(BlockSelection.single(target))

    def _undo(self, event: KeyEvent) -> KeyResult:
        changed = self.undo()
        message = "Undone." if changed else "Nothing to undo (noop)"
        return self._handled(result=OperationResult(changed, message))

    def _redo(self, event: KeyEvent) -> KeyResult:
        changed = self.redo()
        message = "Redone." if changed else "Nothing to redo (noop)"
        return self._handled(result=OperationResult(changed, message))
