from dataclasses import dataclass


@dataclass
class FinishedPiece:
    part_number: int
    etag: str

    def to_json(self) -> dict:
        # amazon s3 style dict
        return {"PartNumber": self.part_number, "ETag": self.etag}

    def __post_init__(self):
        assert isinstance(self.part_number, int)
        assert isinstance(self.etag, str)

    @staticmethod
    def to_json_array(parts: list["FinishedPiece"]) -> list[dict]:
        ordered = sorted(parts, key=lambda x: x.part_number)
        return [p.to_json() for p in ordered]

    @staticmethod
    def from_json(json: dict) -> "FinishedPiece":
        """Parse one entry of a list_parts or upload_part response."""
        return FinishedPiece(part_number=int(json["PartNumber"]), etag=json["ETag"])
