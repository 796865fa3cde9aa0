"""
Chunking strategies for file uploads.

The server assigns the chunk size at negotiation; the client only turns it
into byte ranges.
"""
from typing import List, Tuple


class FixedSizeChunkingStrategy:
    """
    Fixed-size chunking with 1-based chunk indices.
    
    Chunk i covers [(i - 1) * chunk_size, min(i * chunk_size, file_size)).
    Every chunk but the last is exactly chunk_size bytes.
    """
    
    def __init__(self, chunk_size: int):
        """
        Initialize with chunk size.
        
        Args:
            chunk_size: Size of each chunk in bytes
        """
        if chunk_size <= 0:
            raise ValueError("Chunk size must be positive")
        self.chunk_size = chunk_size
    
    def count(self, file_size: int) -> int:
        """Number of chunks: ceil(file_size / chunk_size)."""
        return (file_size + self.chunk_size - 1) // self.chunk_size
    
    def chunk_range(self, index: int, file_size: int) -> Tuple[int, int]:
        """
        Byte range of one chunk.
        
        Args:
            index: 1-based chunk index
            file_size: Total file size in bytes
            
        Returns:
            (start, end) tuple, end exclusive
            
        Raises:
            IndexError: If index is outside 1..count(file_size)
        """
        total = self.count(file_size)
        if not 1 <= index <= total:
            raise IndexError(f"Chunk index {index} out of range 1..{total}")
        start = (index - 1) * self.chunk_size
        return start, min(start + self.chunk_size, file_size)
    
    def calculate_chunks(self, file_size: int) -> List[Tuple[int, int]]:
        """
        Calculate fixed-size chunk boundaries.
        
        Args:
            file_size: Total file size in bytes
            
        Returns:
            List of (start, end) tuples in index order
        """
        if file_size == 0:
            return []
        
        chunks = []
        position = 0
        
        while position < file_size:
            end = min(position + self.chunk_size, file_size)
            chunks.append((position, end))
            position = end
        
        return chunks
