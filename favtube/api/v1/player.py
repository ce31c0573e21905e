"""
FavTube - Player API
Sequential playback of a playlist snapshot

A player exists only while something is queued: it is created by loading a
playlist and dropped from the registry when stopped or played to the end.
"""

from fastapi import APIRouter, Depends

from ..deps import current_user, get_players, get_store
from ...errors import EmptyQueueError, ValidationError
from ...schemas import PlayerLoad, PlayerStatus
from ...services import END_OF_QUEUE, PlayerRegistry, PlaylistStore, QueuePlayer, SortMode, project

router = APIRouter(prefix="/libraries/{user_id}/player")


def _status(player: QueuePlayer, end_of_queue: bool = False) -> PlayerStatus:
    return PlayerStatus(
        state=player.state.value,
        position=player.position,
        length=len(player.queue),
        current=player.current() if player.queue else None,
        end_of_queue=end_of_queue,
    )


def _active_player(players: PlayerRegistry, user_id: str) -> QueuePlayer:
    player = players.find(user_id)
    if player is None:
        raise EmptyQueueError("Nothing is playing")
    return player


@router.post("", response_model=PlayerStatus, status_code=201)
def start_playback(
    payload: PlayerLoad,
    user_id: str = Depends(current_user),
    store: PlaylistStore = Depends(get_store),
    players: PlayerRegistry = Depends(get_players),
):
    """
    Load a playlist into the user's player

    The queue is the playlist as filtered and sorted right now; later edits to
    the playlist do not change what is queued.
    """
    playlist = store.get_playlist(user_id, payload.playlist_id)
    queue = project(playlist.items, payload.q, SortMode.parse(payload.sort))

    player = players.get(user_id)
    try:
        player.load(queue)
    except ValidationError:
        # Drop a player that this failed load left idle
        if not player.queue:
            players.discard(user_id)
        raise
    return _status(player)


@router.get("", response_model=PlayerStatus)
def now_playing(
    user_id: str = Depends(current_user),
    players: PlayerRegistry = Depends(get_players),
):
    """Current item (409 when nothing is playing)"""
    player = _active_player(players, user_id)
    player.current()
    return _status(player)


@router.post("/next", response_model=PlayerStatus)
def next_item(
    user_id: str = Depends(current_user),
    players: PlayerRegistry = Depends(get_players),
):
    """Advance; after the last item the player stops and end_of_queue is set"""
    player = _active_player(players, user_id)
    result = player.advance()
    if result is END_OF_QUEUE:
        players.discard(user_id)
        return _status(player, end_of_queue=True)
    return _status(player)


@router.post("/previous", response_model=PlayerStatus)
def previous_item(
    user_id: str = Depends(current_user),
    players: PlayerRegistry = Depends(get_players),
):
    """Step back, staying on the first item when already there"""
    player = _active_player(players, user_id)
    player.retreat()
    return _status(player)


@router.delete("", status_code=204)
def stop_playback(
    user_id: str = Depends(current_user),
    players: PlayerRegistry = Depends(get_players),
):
    player = players.discard(user_id)
    if player is not None:
        player.stop()
    return None
