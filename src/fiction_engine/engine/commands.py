"""
commands.py

PURPOSE: Built-in verb handlers (move, look, take, talk, trade, ...).
DEPENDENCIES: world_view.py, events.py, results.py, models, ai/types.py

ARCHITECTURE NOTES:
Each verb has a handler that:
- Validates the action is possible (visibility, capability, ownership)
- Updates game state, inventories and placement
- Emits UI events and returns a CommandResult

Handlers run against the WorldView, so the same code serves both the
spatial and the flat backend. They never raise for bad input; a failed
precondition is CommandResult.fail(message) with nothing changed.

Only talk is a coroutine: it may await the conversation collaborator.
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from fiction_engine.ai.types import (
    CollaboratorError,
    ConversationContext,
    ConversationResponder,
    GameContext,
    ParsedIntent,
    SceneEntity,
    guarded,
)
from fiction_engine.constants import DEFAULT_COLLABORATOR_TIMEOUT, PLAYER_ID
from fiction_engine.engine.events import (
    ConversationData,
    ConversationEvent,
    EntityDescriptionData,
    EntityDescriptionEvent,
    EntityRef,
    EventBus,
    InventoryDisplayData,
    InventoryDisplayEvent,
    LocationDisplayData,
    LocationDisplayEvent,
)
from fiction_engine.engine.results import CommandResult
from fiction_engine.engine.world_view import WorldView, is_portable
from fiction_engine.models.inventory import InventoryStore
from fiction_engine.models.state import GameState
from fiction_engine.models.world import ConversationalProfile, WorldDefinition
from fiction_engine.world.spatial import SpatialRelation
from fiction_engine.world.things import Container, Enterable, Supporter, Thing, Vehicle

logger = logging.getLogger(__name__)

COMMAND_HELP = """\
move <direction>         go north/south/east/west/up/down/in/out
look [thing]             describe the room or something in it
take/drop <thing>        pick up or put down
put <thing> in/on <thing>
open/close <thing>
lock/unlock <thing> [with <key>]
read <thing>
climb <thing>
enter/exit [thing]       get into or out of something
inventory                list what you carry
check <character>'s bag  see what someone carries
talk to <character> [about <topic>]
ask <character> about <topic>
give <thing> to <character>
trade <thing> for <thing> with <character>"""


@dataclass
class CommandContext:
    """Everything a handler may read or change during one command."""

    world_def: WorldDefinition
    world: WorldView
    state: GameState
    inventory: InventoryStore
    events: EventBus
    conversation: ConversationResponder | None = None
    timeout: float = DEFAULT_COLLABORATOR_TIMEOUT
    raw_input: str = ""

    def name_of(self, thing_id: str) -> str:
        thing = self.world.get_thing(thing_id)
        return thing.name if thing else thing_id

    def entity(self, thing: Thing) -> SceneEntity:
        return SceneEntity(id=thing.id, name=thing.name, description=thing.description)

    def current_room_id(self) -> str:
        return self.state.current_location

    def game_context(self) -> GameContext:
        """Snapshot of what the player perceives, for the AI collaborators."""
        room = self.world.get_room(self.state.current_location)
        if room is None:
            location = SceneEntity(id=self.state.current_location, name=self.state.current_location)
            exits: dict[str, str] = {}
            visible: list[Thing] = []
        else:
            location = self.entity(room)
            exits = {direction: room.connections[direction] for direction in room.get_exits()}
            visible = self.world.visible_things(room.id)

        carried = [self.world.get_thing(i) for i in self.inventory.get_inventory_items(PLAYER_ID)]
        return GameContext(
            location=location,
            exits=exits,
            objects=[self.entity(t) for t in visible if not self.world.is_character(t.id)],
            characters=[self.entity(t) for t in visible if self.world.is_character(t.id)],
            inventory=[self.entity(t) for t in carried if t is not None],
            turn_count=self.state.turn_count,
            recent_actions=list(self.state.recent_actions),
            available_commands=COMMAND_HELP,
        )


Handler = Callable[[ParsedIntent, CommandContext], CommandResult | Awaitable[CommandResult]]


# --- Shared helpers ---


def show_location(ctx: CommandContext) -> None:
    """Emit a location_display for the player's current room."""
    room = ctx.world.get_room(ctx.state.current_location)
    if room is None:
        ctx.events.debug(f"Player is in unknown location {ctx.state.current_location!r}", "error")
        return
    ctx.events.emit(
        LocationDisplayEvent(
            data=LocationDisplayData(
                id=room.id,
                name=room.name,
                description=room.description,
                objects=[EntityRef(id=t.id, name=t.name) for t in ctx.world.objects_in_room(room.id)],
                characters=[
                    EntityRef(id=t.id, name=t.name) for t in ctx.world.characters_in_room(room.id)
                ],
                exits=room.get_exits(),
            )
        )
    )


def _join_names(things: list[Thing]) -> str:
    return ", ".join(thing.name for thing in things)


def _find_carried(ctx: CommandContext, owner_id: str, target: str | None) -> Thing | None:
    """An item in someone's inventory, by id or display name."""
    if not target:
        return None
    if ctx.inventory.has_item(owner_id, target):
        return ctx.world.get_thing(target)
    # Parsers hand back "brass_key" for an unresolved "brass key"
    names = {target.lower(), target.replace("_", " ").lower()}
    for item_id in ctx.inventory.get_inventory_items(owner_id):
        item = ctx.world.get_thing(item_id)
        if item and item.name.lower() in names:
            return item
    return None


def _find_reachable(ctx: CommandContext, target: str | None) -> Thing | None:
    """Something the player carries or can see here."""
    if not target:
        return None
    carried = _find_carried(ctx, PLAYER_ID, target)
    if carried is not None:
        return carried
    return ctx.world.find_visible(target, ctx.current_room_id())


def _people_inside(ctx: CommandContext, thing_id: str) -> list[Thing]:
    """The player and characters anywhere inside a thing."""
    found: list[Thing] = []
    pending = list(ctx.world.children_of(thing_id))
    while pending:
        thing = pending.pop(0)
        if thing.id == PLAYER_ID or ctx.world.is_character(thing.id):
            found.append(thing)
        pending.extend(ctx.world.children_of(thing.id))
    return found


def _find_character(ctx: CommandContext, character_id: str | None) -> tuple[Thing | None, str | None]:
    """The character the player addressed (or the first one here); else an error line."""
    room_id = ctx.current_room_id()
    if not character_id:
        present = ctx.world.characters_in_room(room_id)
        if not present:
            return None, "There's nobody here."
        return present[0], None

    thing = ctx.world.find_visible(character_id, room_id)
    if thing is None or not ctx.world.is_character(thing.id):
        known = ctx.world.get_thing(character_id)
        if known is not None and ctx.world.is_character(known.id):
            return None, f"{known.name} isn't here."
        return None, f"You don't see anyone called {character_id} here."
    return thing, None


def _relocate_player(ctx: CommandContext, room_id: str, arrival: str | None = None) -> bool:
    """Move the player to a room; `arrival` is said once they're there."""
    if ctx.world.get_room(room_id) is None:
        ctx.events.debug(f"Destination {room_id!r} is not a room", "warn")
        return False
    if not ctx.world.move_player(room_id):
        return False
    ctx.state.set_current_location(room_id)
    if arrival:
        ctx.events.message(arrival)
    show_location(ctx)
    return True


# --- Movement ---


def handle_move(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle MOVE <direction>, driving the vehicle when the player is in one."""
    direction = intent.target
    if not direction:
        return CommandResult.fail("Move where?")

    room = ctx.world.get_room(ctx.current_room_id())
    if room is None:
        return CommandResult.fail("You are nowhere.")

    destination = room.get_connection(direction)
    if destination is None:
        return CommandResult.fail(f"You can't go {direction} from here.")

    holder = ctx.world.player_holder()
    match holder:
        case None:
            pass
        case Vehicle():
            key = holder.required_key
            if key and not ctx.inventory.has_item(PLAYER_ID, key):
                return CommandResult.fail(
                    f"You need the {ctx.name_of(key)} to start the {holder.name}."
                )
            if ctx.world.room_of(holder.id) is None:
                return CommandResult.fail(f"The {holder.name} isn't going anywhere.")
            if not holder.start(key):
                return CommandResult.fail(f"The {holder.name} won't start.")
            if not ctx.world.relocate(holder.id, destination):
                return CommandResult.fail(f"The {holder.name} can't go that way.")
            ctx.state.set_current_location(destination)
            ctx.events.message(f"You drive the {holder.name} {direction}.")
            show_location(ctx)
            return CommandResult.ok()
        case _:
            return CommandResult.fail(f"You'll need to get out of the {holder.name} first.")

    if not _relocate_player(ctx, destination):
        return CommandResult.fail(f"You can't go {direction} from here.")
    return CommandResult.ok()


def handle_climb(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle CLIMB <thing>; climbable things may lead somewhere."""
    if not intent.target:
        return CommandResult.fail("Climb what?")
    thing = _find_reachable(ctx, intent.target)
    if thing is None:
        return CommandResult.fail("You can't see that here.")
    if not thing.properties.get("climbable"):
        return CommandResult.fail(f"You can't climb the {thing.name}.")

    destination = thing.properties.get("climb_destination")
    if not destination:
        return CommandResult.ok(f"You climb the {thing.name}, but get nowhere.")
    holder = ctx.world.player_holder()
    if holder is not None:
        return CommandResult.fail(f"You'll need to get out of the {holder.name} first.")

    if not _relocate_player(ctx, destination, arrival=f"You climb the {thing.name}."):
        return CommandResult.fail(f"The {thing.name} doesn't lead anywhere.")
    return CommandResult.ok()


def handle_enter(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle ENTER <thing> (enterables, vehicles, or things leading elsewhere)."""
    if not intent.target:
        return CommandResult.fail("Enter what?")
    thing = ctx.world.find_visible(intent.target, ctx.current_room_id())
    if thing is None:
        return CommandResult.fail("You can't see that here.")

    destination = thing.properties.get("enter_destination")
    if destination:
        if not _relocate_player(ctx, destination):
            return CommandResult.fail(f"You can't get into the {thing.name}.")
        return CommandResult.ok()

    holder = ctx.world.player_holder()
    if holder is not None and holder.id == thing.id:
        return CommandResult.fail(f"You're already in the {thing.name}.")
    if not isinstance(thing, Enterable | Vehicle):
        return CommandResult.fail(f"You can't get into the {thing.name}.")
    if isinstance(thing, Vehicle) and not thing.is_operational:
        return CommandResult.fail(f"The {thing.name} is out of order.")
    if not ctx.world.relocate(PLAYER_ID, thing.id):
        return CommandResult.fail(f"There's no room in the {thing.name}.")

    verb = "board" if isinstance(thing, Vehicle) else "get into"
    return CommandResult.ok(f"You {verb} the {thing.name}.")


def handle_exit(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:  # noqa: ARG001
    """Handle EXIT: step out of whatever the player is in."""
    holder = ctx.world.player_holder()
    if holder is None:
        return CommandResult.fail("You're not inside anything.")
    room_id = ctx.world.room_of(holder.id)
    if room_id is None or not ctx.world.move_player(room_id):
        return CommandResult.fail(f"You can't get out of the {holder.name}.")
    ctx.state.set_current_location(room_id)
    return CommandResult.ok(f"You get out of the {holder.name}.")


# --- Looking ---


def _extra_details(thing: Thing, ctx: CommandContext) -> list[str]:
    details: list[str] = []
    match thing:
        case Container():
            if thing.is_openable and not thing.is_open:
                details.append(f"The {thing.name} is {'locked' if thing.is_locked else 'closed'}.")
            else:
                contents = ctx.world.children_of(thing.id)
                if contents:
                    details.append(f"Inside the {thing.name} you see: {_join_names(contents)}.")
                else:
                    details.append(f"The {thing.name} is empty.")
        case Supporter():
            on_top = ctx.world.children_of(thing.id)
            if on_top:
                details.append(f"On the {thing.name} you see: {_join_names(on_top)}.")
        case Enterable() | Vehicle():
            occupants = [t for t in ctx.world.children_of(thing.id) if t.id != PLAYER_ID]
            if occupants:
                details.append(f"In the {thing.name} you see: {_join_names(occupants)}.")
    if thing.properties.get("readable") and thing.properties.get("text_content"):
        details.append("There's something written on it.")
    return details


def handle_look(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle LOOK / LOOK AT <thing>."""
    if not intent.target or intent.target in ("around", "room", ctx.current_room_id()):
        show_location(ctx)
        return CommandResult.ok()

    thing = _find_reachable(ctx, intent.target)
    if thing is None:
        return CommandResult.fail("You can't see that here.")

    text = thing.description or f"You see nothing special about the {thing.name}."
    details = _extra_details(thing, ctx)
    if details:
        text += "\n\n" + "\n".join(details)

    kind = "character" if ctx.world.is_character(thing.id) else "object"
    ctx.events.emit(
        EntityDescriptionEvent(
            data=EntityDescriptionData(id=thing.id, name=thing.name, description=text, kind=kind)
        )
    )
    return CommandResult.ok()


def handle_read(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle READ <thing>."""
    if not intent.target:
        return CommandResult.fail("Read what?")
    thing = _find_reachable(ctx, intent.target)
    if thing is None:
        return CommandResult.fail("You can't see that here.")
    text = thing.properties.get("text_content")
    if not thing.properties.get("readable") or not text:
        return CommandResult.fail(f"There's nothing to read on the {thing.name}.")
    return CommandResult.ok(text)


# --- Objects ---


def handle_take(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle TAKE <thing>: out of the world tree and into the player's inventory."""
    if not intent.target:
        return CommandResult.fail("Take what?")
    if ctx.inventory.has_item(PLAYER_ID, intent.target):
        return CommandResult.fail("You already have that.")

    thing = ctx.world.find_visible(intent.target, ctx.current_room_id())
    if thing is None:
        return CommandResult.fail("You can't see that here.")
    if ctx.world.is_character(thing.id) or not is_portable(thing):
        return CommandResult.fail(f"You can't take the {thing.name}.")

    inside = _people_inside(ctx, thing.id)
    if any(person.id == PLAYER_ID for person in inside):
        return CommandResult.fail(f"You can't take the {thing.name} while you're in it.")
    if inside:
        return CommandResult.fail(f"You can't take the {thing.name} with {inside[0].name} in it.")
    # Carried things are out of the world tree, so contents would be stranded
    if ctx.world.children_of(thing.id):
        return CommandResult.fail(f"You'll need to empty the {thing.name} first.")

    ctx.world.detach(thing.id)
    ctx.inventory.add_item_to_inventory(PLAYER_ID, thing.id)
    return CommandResult.ok(f"You take the {thing.name}.")


def handle_drop(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle DROP <thing>: it lands in the player's room."""
    if not intent.target:
        return CommandResult.fail("Drop what?")
    thing = _find_reachable(ctx, intent.target)
    if thing is None or not ctx.inventory.has_item(PLAYER_ID, thing.id):
        return CommandResult.fail("You're not carrying that.")

    if not ctx.world.place(thing.id, ctx.current_room_id()):
        return CommandResult.fail(f"You can't drop the {thing.name} here.")
    ctx.inventory.remove_item_from_inventory(PLAYER_ID, thing.id)
    return CommandResult.ok(f"You drop the {thing.name}.")


def handle_put(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle PUT <thing> IN/ON <thing>."""
    if not intent.target:
        return CommandResult.fail("Put what?")
    item = _find_reachable(ctx, intent.target)
    if item is None or not ctx.inventory.has_item(PLAYER_ID, item.id):
        return CommandResult.fail("You're not carrying that.")
    if not intent.player_item:
        return CommandResult.fail(f"Put the {item.name} where?")

    destination = ctx.world.find_visible(intent.player_item, ctx.current_room_id())
    if destination is None:
        return CommandResult.fail("You can't see that here.")

    relation = SpatialRelation.ON if intent.topic == "on" else SpatialRelation.IN
    if isinstance(destination, Container) and destination.is_openable and not destination.is_open:
        return CommandResult.fail(f"The {destination.name} is closed.")
    if not ctx.world.relocate(item.id, destination.id, relation):
        return CommandResult.fail(f"You can't put the {item.name} {relation.value} the {destination.name}.")

    ctx.inventory.remove_item_from_inventory(PLAYER_ID, item.id)
    return CommandResult.ok(f"You put the {item.name} {relation.value} the {destination.name}.")


def _container(ctx: CommandContext, target: str | None, verb: str) -> tuple[Container | None, CommandResult | None]:
    if not target:
        return None, CommandResult.fail(f"{verb.capitalize()} what?")
    thing = _find_reachable(ctx, target)
    if thing is None:
        return None, CommandResult.fail("You can't see that here.")
    if not isinstance(thing, Container) or not thing.is_openable:
        return None, CommandResult.fail(f"You can't {verb} the {thing.name}.")
    return thing, None


def handle_open(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle OPEN <container>; opening reveals what's inside."""
    container, error = _container(ctx, intent.target, "open")
    if error:
        return error
    if container.is_open:
        return CommandResult.fail(f"The {container.name} is already open.")
    if container.is_locked:
        return CommandResult.fail(f"The {container.name} is locked.")
    if not container.open():
        return CommandResult.fail(f"You can't open the {container.name}.")

    contents = ctx.world.children_of(container.id)
    if contents:
        return CommandResult.ok(f"You open the {container.name}, revealing: {_join_names(contents)}.")
    return CommandResult.ok(f"You open the {container.name}. It's empty.")


def handle_close(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    container, error = _container(ctx, intent.target, "close")
    if error:
        return error
    if not container.close():
        return CommandResult.fail(f"The {container.name} is already closed.")
    return CommandResult.ok(f"You close the {container.name}.")


def _key_for(container: Container, intent: ParsedIntent, ctx: CommandContext) -> tuple[str | None, CommandResult | None]:
    """The key the player is using: the one named, or the right one if carried."""
    if intent.player_item:
        key = _find_reachable(ctx, intent.player_item)
        if key is None or not ctx.inventory.has_item(PLAYER_ID, key.id):
            return None, CommandResult.fail("You don't have that.")
        return key.id, None
    required = container.unlocks_with_key
    if required and not ctx.inventory.has_item(PLAYER_ID, required):
        return None, CommandResult.fail(f"You need a key for the {container.name}.")
    return required, None


def handle_unlock(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle UNLOCK <container> [WITH <key>]."""
    container, error = _container(ctx, intent.target, "unlock")
    if error:
        return error
    if not container.is_locked:
        return CommandResult.fail(f"The {container.name} isn't locked.")
    key, error = _key_for(container, intent, ctx)
    if error:
        return error
    if not container.unlock(key):
        return CommandResult.fail(f"That doesn't unlock the {container.name}.")
    return CommandResult.ok(f"You unlock the {container.name}.")


def handle_lock(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle LOCK <container> [WITH <key>]."""
    container, error = _container(ctx, intent.target, "lock")
    if error:
        return error
    if container.is_locked:
        return CommandResult.fail(f"The {container.name} is already locked.")
    key, error = _key_for(container, intent, ctx)
    if error:
        return error
    if not container.lock(key):
        return CommandResult.fail(f"That doesn't lock the {container.name}.")
    return CommandResult.ok(f"You lock the {container.name}.")


# --- Inventories ---


def _show_inventory(ctx: CommandContext, owner: str | None, actor_id: str) -> None:
    items = [ctx.world.get_thing(i) for i in ctx.inventory.get_inventory_items(actor_id)]
    ctx.events.emit(
        InventoryDisplayEvent(
            data=InventoryDisplayData(
                items=[EntityRef(id=t.id, name=t.name) for t in items if t is not None],
                owner=owner,
            )
        )
    )


def handle_inventory(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:  # noqa: ARG001
    _show_inventory(ctx, None, PLAYER_ID)
    return CommandResult.ok()


def handle_check_your_inventory(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle CHECK <character>'S BAG."""
    character, error = _find_character(ctx, intent.character_target or intent.target)
    if error:
        return CommandResult.fail(error)
    _show_inventory(ctx, character.id, character.id)
    return CommandResult.ok()


def handle_give(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle GIVE <thing> TO <character>."""
    if not intent.target:
        return CommandResult.fail("Give what?")
    item = _find_reachable(ctx, intent.target)
    if item is None or not ctx.inventory.has_item(PLAYER_ID, item.id):
        return CommandResult.fail("You're not carrying that.")
    if not intent.character_target:
        return CommandResult.fail(f"Give the {item.name} to whom?")
    character, error = _find_character(ctx, intent.character_target)
    if error:
        return CommandResult.fail(error)

    ctx.inventory.create_inventory(character.id)
    if not ctx.inventory.transfer_item(PLAYER_ID, character.id, item.id):
        return CommandResult.fail(f"You can't give the {item.name} away.")
    return CommandResult.ok(f"You give the {item.name} to {character.name}.")


def handle_trade(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """Handle TRADE <mine> FOR <theirs> WITH <character>; both move or neither does."""
    character, error = _find_character(ctx, intent.character_target)
    if error:
        return CommandResult.fail(error)
    if not intent.player_item or not intent.target_item:
        return CommandResult.fail(f"What do you want to trade with {character.name}?")

    offered = _find_carried(ctx, PLAYER_ID, intent.player_item)
    if offered is None:
        return CommandResult.fail(f"You don't have a {ctx.name_of(intent.player_item)}.")
    wanted = _find_carried(ctx, character.id, intent.target_item)
    if wanted is None:
        return CommandResult.fail(f"{character.name} doesn't have a {ctx.name_of(intent.target_item)}.")
    if not ctx.inventory.exchange_items(PLAYER_ID, offered.id, character.id, wanted.id):
        return CommandResult.fail("The trade falls through.")

    return CommandResult.ok(f"You trade your {offered.name} for {character.name}'s {wanted.name}.")


# --- Conversation ---


def _match_topic(profile: ConversationalProfile, topic: str) -> str | None:
    wanted = topic.strip().lower()
    for name, reply in profile.topics.items():
        if name.lower() == wanted:
            return reply
    return None


async def _generated_reply(
    ctx: CommandContext,
    character: Thing,
    profile: ConversationalProfile | None,
    message: str,
) -> str:
    """Ask the conversation collaborator; CollaboratorError if absent or failing."""
    if ctx.conversation is None:
        raise CollaboratorError("No conversation responder configured")
    if profile is None:
        # Stand-in profile so generic characters can still chat
        profile = ConversationalProfile(personality=character.description or None)
    context = ConversationContext(
        character=ctx.entity(character),
        profile=profile,
        history=ctx.state.get_conversation_history(character.id),
        game=ctx.game_context(),
    )
    response = await guarded(
        ctx.conversation.generate_character_response(message, context),
        ctx.timeout,
        "conversation responder",
    )
    return response.text


async def handle_talk(intent: ParsedIntent, ctx: CommandContext) -> CommandResult:
    """
    Handle TALK TO <character> [ABOUT <topic>] (and ASK with no rule).

    Canned lines come first: a known topic's reply, or the greeting on first
    contact. Everything else goes to the conversation collaborator.
    """
    character, error = _find_character(ctx, intent.character_target or intent.target)
    if error:
        return CommandResult.fail(error)

    char_def = ctx.world_def.get_character(character.id)
    profile = char_def.conversational if char_def else None
    topic = intent.topic
    player_line = ctx.raw_input or (f"Tell me about {topic}." if topic else "Hello.")

    reply: str | None = None
    if profile and topic:
        reply = _match_topic(profile, topic)
    elif profile and profile.greeting and not ctx.state.has_spoken_with(character.id):
        reply = profile.greeting

    if reply is None:
        try:
            reply = await _generated_reply(ctx, character, profile, player_line)
        except CollaboratorError as e:
            logger.debug(f"No generated reply from {character.id}: {e}")
            if ctx.conversation is not None:
                return CommandResult.fail(f"{character.name} does not respond.")
            if profile is None:
                return CommandResult.ok(f"{character.name} doesn't seem interested.")
            if topic:
                return CommandResult.ok(f"{character.name} doesn't seem to know about {topic}.")
            reply = "Yes, what is it?"

    ctx.state.add_conversation_entry(character.id, "player", player_line)
    ctx.state.add_conversation_entry(character.id, "character", reply)
    ctx.events.emit(
        ConversationEvent(
            data=ConversationData(
                character_id=character.id,
                character_name=character.name,
                message=reply,
                topics=list(profile.topics) if profile and profile.topics else None,
            )
        )
    )
    return CommandResult.ok()


BUILTIN_HANDLERS: dict[str, Handler] = {
    "move": handle_move,
    "look": handle_look,
    "take": handle_take,
    "drop": handle_drop,
    "put": handle_put,
    "climb": handle_climb,
    "inventory": handle_inventory,
    "check_my_inventory": handle_inventory,
    "check_your_inventory": handle_check_your_inventory,
    "talk": handle_talk,
    "give": handle_give,
    "trade": handle_trade,
    "open": handle_open,
    "close": handle_close,
    "lock": handle_lock,
    "unlock": handle_unlock,
    "read": handle_read,
    "enter": handle_enter,
    "exit": handle_exit,
}
