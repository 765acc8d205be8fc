from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from services.integrity_service import MoveRecord


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class AIConfigurationSchema(CamelModel):
    level: int = 1
    optimal_play_percentage: int = Field(alias="optimalPlayPercentage")
    strategy: str
    max_depth: Optional[int] = Field(None, alias="maxDepth")  # None = unbounded, capped by the service
    current_wins: int = Field(0, alias="currentWins")


class AIMoveRequest(CamelModel):
    board: List[Optional[str]]
    grid_size: int = Field(3, alias="gridSize")
    level: int = 1
    wins: int = 0
    configuration: Optional[AIConfigurationSchema] = None  # overrides level/wins when given
    ai_symbol: str = Field("O", alias="aiSymbol")
    human_symbol: str = Field("X", alias="humanSymbol")


class MoveRecordSchema(CamelModel):
    player: str
    position: int
    timestamp: Optional[datetime] = None
    move_number: int = Field(0, alias="moveNumber")
    client_id: str = Field("", alias="clientId")

    def to_record(self) -> MoveRecord:
        return MoveRecord(
            player=self.player,
            position=self.position,
            timestamp=self.timestamp,
            move_number=self.move_number,
            client_id=self.client_id,
        )


class IntegrityRequest(CamelModel):
    final_board: List[Optional[str]] = Field(alias="finalBoard")
    move_history: List[MoveRecordSchema] = Field(default_factory=list, alias="moveHistory")
    grid_size: int = Field(3, ge=3, le=4, alias="gridSize")
