"""Developer memory routes."""

import dataclasses

from fastapi import APIRouter, Depends, HTTPException

from ..schemas import MemoryCreate, MemoryListResponse, OkResponse
from ..services import Services, get_services

router = APIRouter(prefix="/memory")


@router.get("", response_model=MemoryListResponse)
async def list_memories(services: Services = Depends(get_services)):
    memories = [dataclasses.asdict(m) for m in services.memory.all()]
    return MemoryListResponse(memories=memories, total=len(memories))


@router.post("", response_model=OkResponse)
async def add_memory(request: MemoryCreate, services: Services = Depends(get_services)):
    return services.memory.add_manual(request.fact)


@router.delete("", response_model=OkResponse)
async def clear_memories(services: Services = Depends(get_services)):
    services.memory.clear()
    return OkResponse(total=0)


@router.delete("/{index}", response_model=OkResponse)
async def delete_memory(index: int, services: Services = Depends(get_services)):
    try:
        services.memory.delete(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Memory not found")
    return OkResponse(total=len(services.memory.all()))
