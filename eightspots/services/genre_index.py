from typing import Dict, Iterable, List, Sequence

from eightspots.services.exceptions import GenreVocabularyError, UnknownGenreLabelError


def _ranking_key(entry):
    # 점수 내림차순, 동점이면 먼저 등록된(id가 작은) 항목이 앞
    return (-entry.score, entry.id)


class GenreIndex:
    """
    고정된 장르 어휘를 비트 플래그로 인코딩/디코딩합니다.

    i번째 라벨은 비트 위치 i(1 << i)에 대응합니다. 이미 저장된 비트맵의 의미가
    바뀌지 않도록 어휘는 끝에 추가만 가능하며, 기존 위치를 재배치해서는 안 됩니다.
    """

    def __init__(self, labels: Sequence[str]):
        labels = tuple(labels)
        if any(not label for label in labels):
            raise ValueError("Genre labels must not be empty.")
        if len(set(labels)) != len(labels):
            raise ValueError("Genre labels must be unique.")
        self.labels = labels
        self._positions = {label: i for i, label in enumerate(labels)}

    def bit(self, label: str) -> int:
        """
        라벨에 해당하는 비트 값을 반환합니다.

        Raises:
            UnknownGenreLabelError: 어휘에 없는 라벨일 때.
        """
        position = self._positions.get(label)
        if position is None:
            raise UnknownGenreLabelError(label)
        return 1 << position

    def encode(self, labels: Iterable[str]) -> int:
        """
        선택된 라벨들을 하나의 비트맵으로 합칩니다. 알 수 없는 라벨은 버리지 않고 거부합니다.

        Raises:
            UnknownGenreLabelError: 어휘에 없는 라벨이 포함되었을 때.
        """
        bitmap = 0
        for label in labels:
            bitmap |= self.bit(label)
        return bitmap

    def decode(self, bitmap: int) -> List[str]:
        """
        비트맵을 어휘 순서의 라벨 목록으로 변환합니다. 어휘 길이 이상의 비트는 무시합니다.

        Raises:
            ValueError: 비트맵이 음수일 때.
        """
        if bitmap < 0:
            raise ValueError(f"Genre bitmap must be non-negative, got {bitmap}.")
        return [label for i, label in enumerate(self.labels) if bitmap & (1 << i)]

    def as_dict(self) -> List[Dict]:
        return [{"label": label, "bit": 1 << i} for i, label in enumerate(self.labels)]

    def assert_extends(self, previous_labels: Sequence[str]) -> None:
        """
        현재 어휘가 이전 어휘를 접두사로 포함하는지(끝에 추가만 했는지) 확인합니다.

        Raises:
            GenreVocabularyError: 기존 비트 위치의 라벨이 바뀌었거나 삭제되었을 때.
        """
        previous_labels = tuple(previous_labels)
        if len(previous_labels) > len(self.labels):
            raise GenreVocabularyError(
                f"Genre vocabulary shrank from {len(previous_labels)} to {len(self.labels)} labels."
            )
        for i, label in enumerate(previous_labels):
            if self.labels[i] != label:
                raise GenreVocabularyError(
                    f"Bit {i} was reassigned from '{label}' to '{self.labels[i]}'."
                )

    def top_n_by_genre(self, label: str, entries: Iterable, n: int) -> List:
        """
        장르 비트가 설정된 항목을 점수 내림차순(동점이면 id 오름차순)으로 최대 n개 반환합니다.
        entries의 각 항목은 id, score, genre_bitmap 속성을 가져야 합니다.
        """
        genre_bit = self.bit(label)
        matching = [entry for entry in entries if entry.genre_bitmap & genre_bit]
        return sorted(matching, key=_ranking_key)[:max(n, 0)]

    def group_top_n(self, entries: Iterable, n: int) -> Dict[str, List]:
        """
        전체 항목을 한 번만 순회하여 장르별 상위 n개를 계산합니다.
        top_n_by_genre를 라벨마다 호출한 것과 같은 순서를 보장합니다.
        """
        groups: Dict[str, List] = {label: [] for label in self.labels}
        for entry in sorted(entries, key=_ranking_key):
            for label in self.decode(entry.genre_bitmap):
                if len(groups[label]) < n:
                    groups[label].append(entry)
        return groups
