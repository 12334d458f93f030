"""Like/dislike toggling for posts and replies.

A user sits in at most one of the two sets. Toggling a reaction the user
already has removes it; toggling the other one moves the user across.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal

Reaction = Literal["like", "dislike"]


@dataclass(slots=True)
class ReactionState:
	likes: List[str]
	dislikes: List[str]

	def payload(self, user_id: str) -> dict:
		return {
			"likeCount": len(self.likes),
			"dislikeCount": len(self.dislikes),
			"liked": user_id in self.likes,
			"disliked": user_id in self.dislikes,
		}


def toggle(likes: List[str], dislikes: List[str], user_id: str, reaction: Reaction) -> ReactionState:
	likes = list(likes)
	dislikes = list(dislikes)
	chosen, other = (likes, dislikes) if reaction == "like" else (dislikes, likes)
	if user_id in chosen:
		chosen[:] = [value for value in chosen if value != user_id]
	else:
		chosen.append(user_id)
		other[:] = [value for value in other if value != user_id]
	return ReactionState(likes=likes, dislikes=dislikes)
